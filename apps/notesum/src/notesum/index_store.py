from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
import hashlib
import logging

from sqlalchemy import delete, inspect, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from notesum.corpus import CorpusReadError
from notesum.db import Base
from notesum.models import NoteAliasRecord, NoteLinkRecord, NoteRecord
from notesum.types import Document

logger = logging.getLogger(__name__)


def _content_hash(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def persist_vault_index(engine: Engine, documents: Sequence[Document]) -> int:
    """Replace the stored note index with ``documents``, keeping their order."""
    Base.metadata.create_all(bind=engine)

    with Session(engine) as session, session.begin():
        session.execute(delete(NoteLinkRecord))
        session.execute(delete(NoteAliasRecord))
        session.execute(delete(NoteRecord))
        session.flush()

        for position, document in enumerate(documents):
            session.add(
                NoteRecord(
                    path=document.path,
                    position=position,
                    text=document.text,
                    content_hash=_content_hash(document.text),
                )
            )
        session.flush()

        session.add_all(
            NoteAliasRecord(note_path=document.path, position=index, alias=alias)
            for document in documents
            for index, alias in enumerate(document.aliases)
        )
        session.add_all(
            NoteLinkRecord(note_path=document.path, position=index, token=token)
            for document in documents
            for index, token in enumerate(document.links)
        )

    logger.info("Persisted note index with %d notes", len(documents))
    return len(documents)


def index_exists(engine: Engine) -> bool:
    return inspect(engine).has_table(NoteRecord.__tablename__)


class IndexedCorpus:
    """Read-only snapshot of the stored note index."""

    def __init__(self, engine: Engine) -> None:
        if not index_exists(engine):
            raise FileNotFoundError(
                "Note index not found. Run `notesum index` or POST /index/rebuild first."
            )

        with Session(engine) as session:
            notes = session.scalars(select(NoteRecord).order_by(NoteRecord.position)).all()
            aliases = session.execute(
                select(NoteAliasRecord.note_path, NoteAliasRecord.alias).order_by(
                    NoteAliasRecord.note_path, NoteAliasRecord.position
                )
            ).all()
            links = session.execute(
                select(NoteLinkRecord.note_path, NoteLinkRecord.token).order_by(
                    NoteLinkRecord.note_path, NoteLinkRecord.position
                )
            ).all()

        aliases_by_path: dict[str, list[str]] = defaultdict(list)
        for note_path, alias in aliases:
            aliases_by_path[note_path].append(alias)
        links_by_path: dict[str, list[str]] = defaultdict(list)
        for note_path, token in links:
            links_by_path[note_path].append(token)

        self._documents = tuple(
            Document(
                path=note.path,
                text=note.text,
                aliases=tuple(aliases_by_path.get(note.path, ())),
                links=tuple(links_by_path.get(note.path, ())),
            )
            for note in notes
        )
        self._by_path = {document.path: document for document in self._documents}

    def get_by_path(self, path: str) -> Document | None:
        return self._by_path.get(path)

    def list_all(self) -> Sequence[Document]:
        return self._documents

    def read(self, document: Document) -> str:
        stored = self._by_path.get(document.path)
        if stored is None:
            raise CorpusReadError(f"Note is not in the index: {document.path}")
        return stored.text
