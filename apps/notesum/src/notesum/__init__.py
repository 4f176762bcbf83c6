from notesum.aggregator import SummarizationCancelled, aggregate_links
from notesum.llm import CompletionClient, CompletionError, UnsupportedProviderError
from notesum.prompts import build_messages
from notesum.resolver import resolve_reference
from notesum.service import NoteNotFoundError, summarize_note

__all__ = [
    "CompletionClient",
    "CompletionError",
    "NoteNotFoundError",
    "SummarizationCancelled",
    "UnsupportedProviderError",
    "aggregate_links",
    "build_messages",
    "resolve_reference",
    "summarize_note",
]
