from collections.abc import Sequence
from threading import Event

import pytest

from notesum.aggregator import SummarizationCancelled
from notesum.corpus import InMemoryCorpus
from notesum.llm import CompletionError, UnsupportedProviderError
from notesum.service import NoteNotFoundError, summarize_note
from notesum.types import Document, LLMConfig, PromptMessages

CONFIG = LLMConfig(provider="openai", model="gpt-4o", api_key="sk-test")


class FakeLLMClient:
    def __init__(self, answer: str = "mocked summary") -> None:
        self.answer = answer
        self.calls: list[tuple[PromptMessages, LLMConfig]] = []

    def complete(self, messages: PromptMessages, config: LLMConfig) -> str:
        self.calls.append((messages, config))
        return self.answer


class FailingLLMClient:
    def complete(self, messages: PromptMessages, config: LLMConfig) -> str:
        raise CompletionError("simulated failure")


class SpyCorpus:
    def __init__(self, documents: list[Document]) -> None:
        self._inner = InMemoryCorpus(documents)
        self.listed = 0
        self.reads: list[str] = []

    def get_by_path(self, path: str) -> Document | None:
        return self._inner.get_by_path(path)

    def list_all(self) -> Sequence[Document]:
        self.listed += 1
        return self._inner.list_all()

    def read(self, document: Document) -> str:
        self.reads.append(document.path)
        return self._inner.read(document)


def _corpus() -> SpyCorpus:
    return SpyCorpus(
        [
            Document(path="alpha.md", text="Alpha body"),
            Document(path="index.md", text="Root body", links=("alpha", "Missing Note")),
        ]
    )


def test_summarize_with_links_sends_root_and_linked_content() -> None:
    llm_client = FakeLLMClient()

    result = summarize_note(
        "index.md",
        with_links=True,
        llm_config=CONFIG,
        corpus=_corpus(),
        llm_client=llm_client,
    )

    assert result.summary == "mocked summary"
    assert (result.provider, result.model) == ("openai", "gpt-4o")
    assert result.aggregate is not None
    assert [entry.token for entry in result.aggregate.entries] == ["alpha"]
    assert [failure.token for failure in result.aggregate.failures] == ["Missing Note"]

    assert len(llm_client.calls) == 1
    messages, config = llm_client.calls[0]
    assert config is CONFIG
    user = messages.messages[1].content
    assert "Main Content:\nRoot body" in user
    assert "Linked Content:\nInternal Link (alpha):\nAlpha body\n\n" in user


def test_summarize_without_links_skips_resolution() -> None:
    corpus = _corpus()
    llm_client = FakeLLMClient()

    result = summarize_note(
        "index.md",
        with_links=False,
        llm_config=CONFIG,
        corpus=corpus,
        llm_client=llm_client,
    )

    assert result.aggregate is None
    assert corpus.listed == 0
    assert corpus.reads == ["index.md"]
    assert llm_client.calls[0][0].messages[1].content == (
        "Please briefly summarize the following text:\n\nRoot body"
    )


def test_summarize_unknown_root_raises_not_found() -> None:
    with pytest.raises(NoteNotFoundError, match="nope.md"):
        summarize_note(
            "nope.md",
            with_links=True,
            llm_config=CONFIG,
            corpus=_corpus(),
            llm_client=FakeLLMClient(),
        )


def test_summarize_unknown_provider_fails_before_any_work() -> None:
    corpus = _corpus()
    llm_client = FakeLLMClient()

    with pytest.raises(UnsupportedProviderError, match="foo"):
        summarize_note(
            "index.md",
            with_links=True,
            llm_config=LLMConfig(provider="foo", model="m"),
            corpus=corpus,
            llm_client=llm_client,
        )

    assert corpus.reads == []
    assert llm_client.calls == []


def test_summarize_propagates_completion_error() -> None:
    with pytest.raises(CompletionError, match="simulated failure"):
        summarize_note(
            "index.md",
            with_links=True,
            llm_config=CONFIG,
            corpus=_corpus(),
            llm_client=FailingLLMClient(),
        )


def test_summarize_cancelled_issues_no_completion() -> None:
    cancel_event = Event()
    cancel_event.set()
    llm_client = FakeLLMClient()

    with pytest.raises(SummarizationCancelled):
        summarize_note(
            "index.md",
            with_links=False,
            llm_config=CONFIG,
            corpus=_corpus(),
            llm_client=llm_client,
            cancel_event=cancel_event,
        )

    assert llm_client.calls == []
