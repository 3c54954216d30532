import uuid
from dataclasses import dataclass
from typing import Any

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from school_records.core.exceptions import NotFoundError, RevisionConflict
from school_records.models.document import Document


def new_revision(previous: str | None = None) -> str:
    """``<generation>-<random hex>``; generation starts at 1."""
    generation = 0
    if previous:
        try:
            generation = int(previous.split("-", 1)[0])
        except ValueError:
            generation = 0
    return f"{generation + 1}-{uuid.uuid4().hex}"


@dataclass(frozen=True)
class StoredDocument:
    id: str
    rev: str
    body: dict[str, Any]


class DocumentStore:
    """
    Revisioned JSON documents in one collection of the ``documents`` table.

    Every mutation of an existing document must carry its current revision.
    The check and the write are a single conditional statement, so two
    writers holding the same revision cannot both succeed.
    """

    def __init__(self, db: AsyncSession, collection: str):
        self.db = db
        self.collection = collection

    async def get(self, doc_id: str) -> StoredDocument:
        row = (
            await self.db.execute(
                select(Document.id, Document.rev, Document.body).where(
                    Document.collection == self.collection,
                    Document.id == doc_id,
                )
            )
        ).first()
        if row is None:
            raise NotFoundError(f"{doc_id} not found")
        return StoredDocument(id=row.id, rev=row.rev, body=dict(row.body))

    async def exists(self, doc_id: str) -> bool:
        row = (
            await self.db.execute(
                select(Document.id).where(
                    Document.collection == self.collection,
                    Document.id == doc_id,
                )
            )
        ).first()
        return row is not None

    async def put(self, doc_id: str, body: dict[str, Any], rev: str | None = None) -> str:
        """
        Create (``rev`` is None) or replace (``rev`` is the current revision).
        Returns the new revision. Raises RevisionConflict otherwise.
        """
        if rev is None:
            return await self._create(doc_id, body)

        new_rev = new_revision(rev)
        result = await self.db.execute(
            update(Document)
            .where(
                Document.collection == self.collection,
                Document.id == doc_id,
                Document.rev == rev,
            )
            .values(rev=new_rev, body=body)
        )
        if result.rowcount != 1:
            if not await self.exists(doc_id):
                raise NotFoundError(f"{doc_id} not found")
            raise RevisionConflict()
        return new_rev

    async def _create(self, doc_id: str, body: dict[str, Any]) -> str:
        if await self.exists(doc_id):
            raise RevisionConflict()
        new_rev = new_revision()
        try:
            await self.db.execute(
                insert(Document).values(
                    collection=self.collection,
                    id=doc_id,
                    rev=new_rev,
                    body=body,
                )
            )
        except IntegrityError as e:
            # lost a race with another create of the same id
            raise RevisionConflict() from e
        return new_rev

    async def delete(self, doc_id: str, rev: str) -> None:
        result = await self.db.execute(
            delete(Document).where(
                Document.collection == self.collection,
                Document.id == doc_id,
                Document.rev == rev,
            )
        )
        if result.rowcount != 1:
            if not await self.exists(doc_id):
                raise NotFoundError(f"{doc_id} not found")
            raise RevisionConflict()

    async def list_all(self, prefix: str | None = None) -> list[StoredDocument]:
        stmt = select(Document.id, Document.rev, Document.body).where(
            Document.collection == self.collection
        )
        if prefix:
            stmt = stmt.where(Document.id.startswith(prefix, autoescape=True))
        rows = (await self.db.execute(stmt.order_by(Document.id))).all()
        return [StoredDocument(id=r.id, rev=r.rev, body=dict(r.body)) for r in rows]
