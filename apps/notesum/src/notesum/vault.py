"""Markdown vault loading: frontmatter aliases, outgoing link tokens, file-backed corpus."""

from __future__ import annotations

from collections.abc import Sequence
import logging
from pathlib import Path
import re
from typing import Any
from urllib.parse import unquote

import yaml

from notesum.corpus import CorpusReadError, normalize_aliases
from notesum.types import Document

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = {".md"}

_FRONTMATTER_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)", re.DOTALL | re.MULTILINE)
_LINK_RE = re.compile(
    r"!?\[\[(?P<wiki>[^\[\]]+?)\]\]"
    r"|!?\[[^\[\]]*\]\((?P<target>[^()\s]+)(?:\s+\"[^\"]*\")?\)"
)
_URL_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:")
_FENCED_CODE_RE = re.compile(r"^[ \t]*(`{3,}|~{3,}).*?(?:^[ \t]*\1[ \t]*$|\Z)", re.DOTALL | re.MULTILINE)
_INLINE_CODE_RE = re.compile(r"(`+)[^\n]*?\1")


def parse_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    match = _FRONTMATTER_RE.match(text)
    if match is None:
        return {}, text

    body = text[match.end():]
    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as exc:
        logger.warning("Ignoring invalid frontmatter: %s", exc)
        return {}, body

    if not isinstance(data, dict):
        return {}, body
    return data, body


def _wikilink_token(inner: str) -> str:
    target = inner.split("|", 1)[0]
    target = target.split("#", 1)[0]
    return target.strip()


def _markdown_link_token(target: str) -> str:
    if target.startswith("#") or _URL_SCHEME_RE.match(target):
        return ""
    target = target.split("#", 1)[0]
    return unquote(target).strip()


def extract_link_tokens(body: str) -> tuple[str, ...]:
    """Outgoing reference tokens in the order they appear in ``body``.

    Links inside fenced code blocks and inline code spans are ignored.
    """
    prose = _FENCED_CODE_RE.sub("\n", body)
    prose = _INLINE_CODE_RE.sub(" ", prose)
    tokens: list[str] = []
    for match in _LINK_RE.finditer(prose):
        wiki = match.group("wiki")
        if wiki is not None:
            token = _wikilink_token(wiki)
        else:
            token = _markdown_link_token(match.group("target"))
        if token:
            tokens.append(token)
    return tuple(tokens)


def build_document(path: str, text: str) -> Document:
    frontmatter, body = parse_frontmatter(text)
    raw_aliases = frontmatter.get("aliases", frontmatter.get("alias"))
    return Document(
        path=path,
        text=text,
        aliases=normalize_aliases(raw_aliases),
        links=extract_link_tokens(body),
    )


def load_notes(
    vault_dir: Path,
    supported_extensions: set[str] | None = None,
    *,
    keep_unreadable: bool = False,
) -> list[Document]:
    """Load every note under ``vault_dir`` in relative-path order.

    Notes that cannot be read or decoded are logged and left out, or kept
    as text- and metadata-less entries when ``keep_unreadable`` is set.
    """
    if not vault_dir.exists():
        raise FileNotFoundError(f"Vault directory not found: {vault_dir}")
    if not vault_dir.is_dir():
        raise NotADirectoryError(f"Vault path is not a directory: {vault_dir}")

    extensions = supported_extensions or SUPPORTED_EXTENSIONS
    files = sorted(
        (
            path
            for path in vault_dir.rglob("*")
            if path.is_file() and path.suffix.lower() in extensions
        ),
        key=lambda path: path.relative_to(vault_dir).as_posix(),
    )

    documents: list[Document] = []
    for path in files:
        relative_path = path.relative_to(vault_dir).as_posix()
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Cannot read note %s: %s", relative_path, exc)
            if keep_unreadable:
                documents.append(Document(path=relative_path, text=""))
            continue
        documents.append(build_document(relative_path, text))

    logger.info("Loaded %d notes from %s", len(documents), vault_dir)
    return documents


class VaultCorpus:
    """Corpus over a vault directory.

    Metadata is snapshotted at construction; ``read`` goes back to disk.
    Unreadable notes stay resolvable by path and name, and fail on ``read``.
    """

    def __init__(self, vault_dir: Path) -> None:
        self._vault_dir = vault_dir
        self._documents = tuple(load_notes(vault_dir, keep_unreadable=True))
        self._by_path = {document.path: document for document in self._documents}

    def get_by_path(self, path: str) -> Document | None:
        return self._by_path.get(path)

    def list_all(self) -> Sequence[Document]:
        return self._documents

    def read(self, document: Document) -> str:
        try:
            return (self._vault_dir / document.path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise CorpusReadError(f"Failed to read {document.path}: {exc}") from exc
