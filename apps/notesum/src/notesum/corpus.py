from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Protocol

from notesum.types import Document


class CorpusReadError(RuntimeError):
    pass


class Corpus(Protocol):
    def get_by_path(self, path: str) -> Document | None: ...

    def list_all(self) -> Sequence[Document]: ...

    def read(self, document: Document) -> str:
        """Return the note text; raise ``CorpusReadError`` when it cannot be read."""
        ...


def normalize_aliases(raw: object) -> tuple[str, ...]:
    """Collapse a frontmatter alias value (string, list or missing) to a tuple.

    Order is preserved, blanks and repeats are dropped.
    """
    if raw is None:
        return ()
    if isinstance(raw, str):
        candidates: Iterable[object] = [raw]
    elif isinstance(raw, (list, tuple)):
        candidates = raw
    else:
        candidates = [raw]

    aliases: list[str] = []
    for candidate in candidates:
        if candidate is None or isinstance(candidate, (dict, list)):
            continue
        alias = str(candidate).strip()
        if alias and alias not in aliases:
            aliases.append(alias)
    return tuple(aliases)


class InMemoryCorpus:
    """Corpus over an already loaded, ordered list of documents."""

    def __init__(self, documents: Iterable[Document]) -> None:
        self._documents = tuple(documents)
        self._by_path: dict[str, Document] = {}
        for document in self._documents:
            self._by_path.setdefault(document.path, document)

    def get_by_path(self, path: str) -> Document | None:
        return self._by_path.get(path)

    def list_all(self) -> Sequence[Document]:
        return self._documents

    def read(self, document: Document) -> str:
        stored = self._by_path.get(document.path)
        if stored is None:
            raise CorpusReadError(f"Document is not part of this corpus: {document.path}")
        return stored.text
