from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
import logging
from threading import Event

from notesum.corpus import Corpus, CorpusReadError
from notesum.resolver import resolve_reference
from notesum.types import AggregateEntry, AggregateResult, Document, ReferenceFailure

logger = logging.getLogger(__name__)


class SummarizationCancelled(RuntimeError):
    pass


def _raise_if_cancelled(cancel_event: Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise SummarizationCancelled("summarization request was cancelled")


def _fetch_reference(
    token: str,
    corpus: Corpus,
    cancel_event: Event | None,
) -> AggregateEntry | ReferenceFailure:
    _raise_if_cancelled(cancel_event)

    document = resolve_reference(token, corpus)
    if document is None:
        logger.info("Skipping unresolved link %r", token)
        return ReferenceFailure(token=token, kind="not_found")

    try:
        text = corpus.read(document)
    except (CorpusReadError, OSError, ValueError) as exc:
        logger.warning("Skipping link %r: failed to read %s: %s", token, document.path, exc)
        return ReferenceFailure(token=token, kind="read_failure", detail=str(exc))

    return AggregateEntry(token=token, path=document.path, text=text)


def aggregate_links(
    root: Document,
    corpus: Corpus,
    *,
    max_workers: int = 1,
    cancel_event: Event | None = None,
) -> AggregateResult:
    """Resolve and read every outgoing link of ``root``.

    Entries keep the order links appear in the root note, repeats included.
    Unresolved links and read failures are recorded as failures and never
    raised. With ``max_workers > 1`` fetches run on a thread pool and are
    reordered before concatenation.
    """
    tokens = root.links
    if max_workers <= 1 or len(tokens) <= 1:
        outcomes = [_fetch_reference(token, corpus, cancel_event) for token in tokens]
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            futures = [
                pool.submit(_fetch_reference, token, corpus, cancel_event) for token in tokens
            ]
            try:
                outcomes = [future.result() for future in futures]
            except SummarizationCancelled:
                pool.shutdown(wait=False, cancel_futures=True)
                raise

    entries = tuple(outcome for outcome in outcomes if isinstance(outcome, AggregateEntry))
    failures = tuple(outcome for outcome in outcomes if isinstance(outcome, ReferenceFailure))
    logger.info(
        "Aggregated links for %s resolved=%d failed=%d",
        root.path,
        len(entries),
        len(failures),
    )
    return AggregateResult(entries=entries, failures=failures)
