from pathlib import Path
from typing import Annotated, Any

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from notesum.config import configure_logging, get_settings
from notesum.corpus import Corpus, CorpusReadError
from notesum.db import get_engine
from notesum.index_store import IndexedCorpus, persist_vault_index
from notesum.llm import CompletionClient, CompletionError, LLMClient, UnsupportedProviderError
from notesum.service import NoteNotFoundError, summarize_note
from notesum.types import AggregateResult
from notesum.vault import load_notes

app = FastAPI(title="Note Summarizer API", version="0.1.0")


class SummaryRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    path: str = Field(min_length=1)
    with_links: bool = False
    provider: str | None = Field(default=None, min_length=1)
    model: str | None = Field(default=None, min_length=1)


class IndexRebuildRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    vault_dir: str | None = None


@app.on_event("startup")
def startup() -> None:
    configure_logging(get_settings().log_level)
    get_engine()


def get_llm_client() -> LLMClient:
    settings = get_settings()
    return CompletionClient(timeout_seconds=settings.llm_timeout_seconds)


def get_corpus() -> Corpus:
    try:
        return IndexedCorpus(get_engine())
    except FileNotFoundError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc


def _aggregate_detail(aggregate: AggregateResult | None) -> dict[str, Any] | None:
    if aggregate is None:
        return None
    return {
        "resolved": [
            {"token": entry.token, "path": entry.path} for entry in aggregate.entries
        ],
        "failed": [
            {"token": failure.token, "kind": failure.kind, "detail": failure.detail}
            for failure in aggregate.failures
        ],
    }


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/notes")
def list_notes(corpus: Annotated[Corpus, Depends(get_corpus)]) -> list[dict[str, Any]]:
    return [
        {
            "path": document.path,
            "aliases": list(document.aliases),
            "links": list(document.links),
        }
        for document in corpus.list_all()
    ]


@app.post("/index/rebuild")
def rebuild_index(request: IndexRebuildRequest | None = None) -> dict[str, Any]:
    settings = get_settings()
    vault_dir = Path(request.vault_dir if request and request.vault_dir else settings.vault_dir)

    try:
        documents = load_notes(vault_dir)
    except (FileNotFoundError, NotADirectoryError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    count = persist_vault_index(get_engine(), documents)
    return {"notes": count, "vault_dir": str(vault_dir)}


@app.post("/summaries")
def create_summary(
    request: SummaryRequest,
    corpus: Annotated[Corpus, Depends(get_corpus)],
    llm_client: Annotated[LLMClient, Depends(get_llm_client)],
) -> dict[str, Any]:
    settings = get_settings()
    llm_config = settings.llm_config(provider=request.provider, model=request.model)

    try:
        result = summarize_note(
            request.path,
            with_links=request.with_links,
            llm_config=llm_config,
            corpus=corpus,
            llm_client=llm_client,
            max_workers=settings.aggregate_workers,
        )
    except NoteNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except UnsupportedProviderError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except CompletionError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    except CorpusReadError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc

    return {
        "summary": result.summary,
        "meta": {
            "provider": result.provider,
            "model": result.model,
            "with_links": request.with_links,
            "links": _aggregate_detail(result.aggregate),
        },
    }


def run() -> None:
    import uvicorn

    uvicorn.run("notesum.main:app", host="0.0.0.0", port=8000, reload=False)


if __name__ == "__main__":
    run()
