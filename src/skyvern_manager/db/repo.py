"""Repository for configuration documents.

Encapsulates SQLAlchemy queries and returns domain values (not ORM rows).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from skyvern_manager.db.schema import ConfigDocument

if TYPE_CHECKING:
    from sqlalchemy.orm import Session as DbSession
else:
    DbSession = Session

__all__ = ["DbSession", "DocumentEntity", "commit", "get_document", "put_document"]


@dataclass
class DocumentEntity:
    """A stored configuration document."""

    name: str
    content: str
    updated_at: datetime | None = None


def _document_to_entity(doc: ConfigDocument) -> DocumentEntity:
    """Convert SQLAlchemy ConfigDocument to domain entity."""
    return DocumentEntity(name=doc.name, content=doc.content, updated_at=doc.updated_at)


def get_document(session: DbSession, name: str) -> DocumentEntity | None:
    """Get a document by name."""
    doc = session.get(ConfigDocument, name)
    return _document_to_entity(doc) if doc else None


def put_document(session: DbSession, name: str, content: str) -> DocumentEntity:
    """Create or replace a document. Caller commits."""
    doc = session.get(ConfigDocument, name)
    if doc is None:
        doc = ConfigDocument(name=name, content=content)
        session.add(doc)
    else:
        doc.content = content
    session.flush()
    return _document_to_entity(doc)


def commit(session: DbSession) -> None:
    """Commit current transaction."""
    session.commit()
