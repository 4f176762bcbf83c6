from __future__ import annotations

import logging
from threading import Event

from notesum.aggregator import SummarizationCancelled, aggregate_links
from notesum.corpus import Corpus
from notesum.llm import LLMClient, provider_base_url
from notesum.prompts import build_messages
from notesum.types import AggregateResult, LLMConfig, SummaryResult

logger = logging.getLogger(__name__)


class NoteNotFoundError(LookupError):
    def __init__(self, path: str) -> None:
        super().__init__(f"Note not found: {path}")
        self.path = path


def summarize_note(
    root_path: str,
    *,
    with_links: bool,
    llm_config: LLMConfig,
    corpus: Corpus,
    llm_client: LLMClient,
    max_workers: int = 1,
    cancel_event: Event | None = None,
) -> SummaryResult:
    """Summarize one note, optionally together with the notes it links to.

    Link failures are absorbed into ``SummaryResult.aggregate``; a missing
    root, an unreadable root, an unknown provider and transport failures
    are raised.
    """
    # Fail on an unknown provider before touching the corpus.
    provider_base_url(llm_config.provider)

    root = corpus.get_by_path(root_path)
    if root is None:
        raise NoteNotFoundError(root_path)
    root_text = corpus.read(root)

    aggregate: AggregateResult | None = None
    if with_links:
        aggregate = aggregate_links(
            root,
            corpus,
            max_workers=max_workers,
            cancel_event=cancel_event,
        )

    messages = build_messages(
        root_text,
        aggregate.text if aggregate is not None else None,
        with_links=with_links,
    )

    if cancel_event is not None and cancel_event.is_set():
        raise SummarizationCancelled("summarization request was cancelled")

    logger.info(
        "Requesting summary for %s provider=%s model=%s with_links=%s",
        root.path,
        llm_config.provider,
        llm_config.model,
        with_links,
    )
    summary = llm_client.complete(messages, llm_config)
    return SummaryResult(
        summary=summary,
        provider=llm_config.provider,
        model=llm_config.model,
        aggregate=aggregate,
    )
