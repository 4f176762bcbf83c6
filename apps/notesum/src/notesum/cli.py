from __future__ import annotations

import argparse
from pathlib import Path
import sys

from notesum.config import configure_logging, get_settings
from notesum.db import get_engine
from notesum.index_store import persist_vault_index
from notesum.llm import CompletionClient
from notesum.service import summarize_note
from notesum.vault import VaultCorpus, load_notes


def _build_parser() -> argparse.ArgumentParser:
    settings = get_settings()

    parser = argparse.ArgumentParser(
        prog="notesum",
        description="Summarize markdown notes together with the notes they link to",
    )
    parser.add_argument(
        "--vault-dir",
        default=settings.vault_dir,
        help="Vault directory containing .md notes",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("index", help="Rebuild the stored note index from the vault")

    summarize = subparsers.add_parser("summarize", help="Summarize one note")
    summarize.add_argument("path", help="Note path relative to the vault root")
    summarize.add_argument(
        "--with-links",
        action="store_true",
        help="Include the content of directly linked notes",
    )
    summarize.add_argument("--provider", default=None, help="openai, anthropic or deepseek")
    summarize.add_argument("--model", default=None, help="Model id, optionally provider/model")
    return parser


def _run_index(vault_dir: Path) -> None:
    documents = load_notes(vault_dir)
    count = persist_vault_index(get_engine(), documents)
    print(f"[notesum] indexed notes={count} vault_dir={vault_dir}", flush=True)


def _run_summarize(vault_dir: Path, args: argparse.Namespace) -> None:
    settings = get_settings()
    result = summarize_note(
        args.path,
        with_links=args.with_links,
        llm_config=settings.llm_config(provider=args.provider, model=args.model),
        corpus=VaultCorpus(vault_dir),
        llm_client=CompletionClient(timeout_seconds=settings.llm_timeout_seconds),
        max_workers=settings.aggregate_workers,
    )
    if result.aggregate is not None:
        for failure in result.aggregate.failures:
            print(
                f"[notesum] skipped link={failure.token!r} reason={failure.kind}",
                file=sys.stderr,
                flush=True,
            )
    print(result.summary, flush=True)


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(get_settings().log_level)
    vault_dir = Path(args.vault_dir)

    try:
        if args.command == "index":
            _run_index(vault_dir)
        else:
            _run_summarize(vault_dir, args)
    except Exception as exc:
        print(f"[notesum] failed: {exc}", file=sys.stderr, flush=True)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
