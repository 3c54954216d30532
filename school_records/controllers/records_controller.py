import logging
from dataclasses import dataclass
from typing import Any

import anyio
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from school_records.core.document_store import DocumentStore, StoredDocument
from school_records.core.exceptions import BadRequestError, ConflictError, NotFoundError
from school_records.core.qr import summary_qr_base64
from school_records.schemas.common import MessageResponse, QrCodeResponse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordKind:
    collection: str
    label: str
    qr_fields: tuple[str, ...]


STUDENTS = RecordKind(
    collection="students",
    label="Student",
    qr_fields=("id", "full_name", "contact_number", "email_address", "class"),
)

TEACHERS = RecordKind(
    collection="teachers",
    label="Teacher",
    qr_fields=("id", "full_name", "department", "email_address", "subjects_taught"),
)

STAFF = RecordKind(
    collection="staff",
    label="Staff member",
    qr_fields=("id", "full_name", "contact_number", "email_address", "job_title"),
)


def _to_body(record: BaseModel) -> dict[str, Any]:
    return record.model_dump(mode="json", by_alias=True, exclude={"rev"})


def _public(doc: StoredDocument) -> dict[str, Any]:
    body = dict(doc.body)
    body["id"] = doc.id
    return body


def _store(kind: RecordKind, db: AsyncSession) -> DocumentStore:
    return DocumentStore(db, kind.collection)


async def create_record(kind: RecordKind, record: BaseModel, db: AsyncSession) -> MessageResponse:
    body = _to_body(record)
    store = _store(kind, db)
    if await store.exists(body["id"]):
        raise ConflictError(f"{kind.label} ID already exists")

    rev = await store.put(body["id"], body)
    logger.info("%s created: id=%s", kind.label, body["id"])
    return MessageResponse(message=f"{kind.label} created successfully", id=body["id"], rev=rev)


async def get_record(kind: RecordKind, record_id: str, db: AsyncSession) -> dict[str, Any]:
    try:
        doc = await _store(kind, db).get(record_id)
    except NotFoundError:
        raise NotFoundError(f"{kind.label} not found")
    body = _public(doc)
    body["rev"] = doc.rev
    return body


async def list_records(kind: RecordKind, db: AsyncSession, prefix: str | None = None) -> list[dict[str, Any]]:
    # revisions are left out of listings
    return [_public(doc) for doc in await _store(kind, db).list_all(prefix)]


async def update_record(
    kind: RecordKind,
    record_id: str,
    record: BaseModel,
    db: AsyncSession,
) -> MessageResponse:
    body = _to_body(record)
    if body["id"] != record_id:
        raise BadRequestError("ID in body does not match the URL")

    store = _store(kind, db)
    try:
        current = await store.get(record_id)
    except NotFoundError:
        raise NotFoundError(f"{kind.label} not found")

    # a generated QR code survives a field update
    if "qr_code" in current.body and "qr_code" not in body:
        body["qr_code"] = current.body["qr_code"]

    rev = await store.put(record_id, body, getattr(record, "rev", None) or current.rev)
    logger.info("%s updated: id=%s rev=%s", kind.label, record_id, rev)
    return MessageResponse(message=f"{kind.label} updated successfully", id=record_id, rev=rev)


async def delete_record(kind: RecordKind, record_id: str, db: AsyncSession, rev: str | None = None) -> MessageResponse:
    store = _store(kind, db)
    if rev is None:
        try:
            rev = (await store.get(record_id)).rev
        except NotFoundError:
            raise NotFoundError(f"{kind.label} not found")

    await store.delete(record_id, rev)
    logger.info("%s deleted: id=%s", kind.label, record_id)
    return MessageResponse(message=f"{kind.label} deleted successfully", id=record_id)


def qr_summary(kind: RecordKind, doc: StoredDocument) -> dict[str, Any]:
    body = _public(doc)
    return {field: body.get(field) for field in kind.qr_fields}


async def generate_qr_code(kind: RecordKind, record_id: str, db: AsyncSession) -> QrCodeResponse:
    """Render the record summary as a QR PNG and keep it on the document."""
    store = _store(kind, db)
    try:
        doc = await store.get(record_id)
    except NotFoundError:
        raise NotFoundError(f"{kind.label} not found")

    qr_b64 = await anyio.to_thread.run_sync(summary_qr_base64, qr_summary(kind, doc))

    body = dict(doc.body)
    body["qr_code"] = qr_b64
    await store.put(record_id, body, doc.rev)

    logger.info("QR code generated for %s id=%s", kind.label.lower(), record_id)
    return QrCodeResponse(message="QR code generated and saved successfully", qr_code=qr_b64)
