from datetime import date

from pydantic import BaseModel, Field

from school_records.schemas.common import LeaveRecord, RecordBase, RecordUpdateMixin


class Qualification(BaseModel):
    degree: str
    major: str | None = None
    year: int | None = Field(None, ge=1900, le=2100)
    institute: str | None = None


class TeacherRecord(RecordBase):
    department: str | None = None
    subjects_taught: list[str] = []
    qualification: list[Qualification] = []
    experience: int = Field(0, ge=0)
    joining_date: date | None = None
    previous_school: str | None = None
    salary: float | None = Field(None, ge=0)
    leave_records: list[LeaveRecord] = []


class TeacherRecordUpdate(TeacherRecord, RecordUpdateMixin):
    pass
