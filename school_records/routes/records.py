from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from school_records.controllers import records_controller as ctl
from school_records.controllers.records_controller import STAFF, STUDENTS, TEACHERS, RecordKind
from school_records.core.database import get_db
from school_records.core.dependencies import get_token_claims
from school_records.schemas.common import MessageResponse, QrCodeResponse
from school_records.schemas.staff import StaffRecord, StaffRecordUpdate
from school_records.schemas.student import StudentRecord, StudentRecordUpdate
from school_records.schemas.teacher import TeacherRecord, TeacherRecordUpdate


def build_records_router(
    kind: RecordKind,
    create_model: type[BaseModel],
    update_model: type[BaseModel],
) -> APIRouter:
    """CRUD + QR routes for one record collection. Every route needs a bearer token."""
    router = APIRouter(
        prefix=f"/{kind.collection}",
        tags=[f"Records - {kind.label}"],
        dependencies=[Depends(get_token_claims)],
    )

    @router.post("", response_model=MessageResponse, summary=f"Create {kind.label}")
    async def create(payload: create_model, db: AsyncSession = Depends(get_db)):  # type: ignore[valid-type]
        return await ctl.create_record(kind, payload, db)

    @router.get("", summary=f"List {kind.collection}")
    async def list_all(
        prefix: str | None = Query(None, description="Only ids starting with this prefix"),
        db: AsyncSession = Depends(get_db),
    ) -> list[dict[str, Any]]:
        return await ctl.list_records(kind, db, prefix)

    @router.get("/{record_id}", summary=f"Get {kind.label}")
    async def get_one(record_id: str, db: AsyncSession = Depends(get_db)) -> dict[str, Any]:
        return await ctl.get_record(kind, record_id, db)

    @router.put("/{record_id}", response_model=MessageResponse, summary=f"Update {kind.label}")
    async def update(record_id: str, payload: update_model, db: AsyncSession = Depends(get_db)):  # type: ignore[valid-type]
        return await ctl.update_record(kind, record_id, payload, db)

    @router.delete("/{record_id}", response_model=MessageResponse, summary=f"Delete {kind.label}")
    async def delete(
        record_id: str,
        rev: str | None = Query(None, description="Current revision; the stored one is used when omitted"),
        db: AsyncSession = Depends(get_db),
    ):
        return await ctl.delete_record(kind, record_id, db, rev)

    @router.post("/{record_id}/qr-code", response_model=QrCodeResponse, summary=f"Generate {kind.label} QR code")
    async def qr_code(record_id: str, db: AsyncSession = Depends(get_db)):
        return await ctl.generate_qr_code(kind, record_id, db)

    return router


students_router = build_records_router(STUDENTS, StudentRecord, StudentRecordUpdate)
teachers_router = build_records_router(TEACHERS, TeacherRecord, TeacherRecordUpdate)
staff_router = build_records_router(STAFF, StaffRecord, StaffRecordUpdate)
