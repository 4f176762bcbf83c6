from __future__ import annotations

import logging
from pathlib import PurePosixPath

from notesum.corpus import Corpus
from notesum.types import Document

logger = logging.getLogger(__name__)


def note_basename(path: str) -> str:
    return PurePosixPath(path).stem


def resolve_reference(token: str, corpus: Corpus) -> Document | None:
    """Find the note a reference token points at.

    Tiers are tried in order and the first hit wins: exact path, then
    basename, then alias. Ties inside a tier go to the earliest note in
    ``corpus.list_all()`` order. Matching is exact and case-sensitive.
    Returns ``None`` when nothing matches.
    """
    document = corpus.get_by_path(token)
    if document is not None:
        logger.debug("Resolved %r by path", token)
        return document

    documents = corpus.list_all()
    for document in documents:
        if note_basename(document.path) == token:
            logger.debug("Resolved %r by basename to %s", token, document.path)
            return document

    for document in documents:
        if token in document.aliases:
            logger.debug("Resolved %r by alias to %s", token, document.path)
            return document

    return None
