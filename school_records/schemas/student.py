from datetime import date

from pydantic import BaseModel, Field

from school_records.schemas.common import AttendanceRecord, RecordBase, RecordUpdateMixin


class ExamScore(BaseModel):
    subject: str
    score: float
    grade: str | None = None


class BehavioralRecord(BaseModel):
    date: date
    incident: str
    action_taken: str | None = None


class HealthRecord(BaseModel):
    condition: str
    notes: str | None = None


class FeePaymentRecord(BaseModel):
    date: date
    amount: float = Field(..., ge=0)
    status: str


class Scholarship(BaseModel):
    name: str
    amount: float = Field(..., ge=0)
    date_awarded: date | None = None


class StudentRecord(RecordBase):
    # "class" is a keyword, so the attribute is class_name
    class_name: str | None = Field(None, alias="class")
    section: str | None = None
    roll_number: str | None = None
    subjects_enrolled: list[str] = []
    attendance_records: list[AttendanceRecord] = []
    exam_scores: list[ExamScore] = []
    extracurricular_activities: list[str] = []
    behavioral_records: list[BehavioralRecord] = []
    health_records: list[HealthRecord] = []
    admission_date: date | None = None
    previous_school: str | None = None
    fee_payment_records: list[FeePaymentRecord] = []
    scholarships: list[Scholarship] = []

    model_config = {"extra": "allow", "populate_by_name": True}


class StudentRecordUpdate(StudentRecord, RecordUpdateMixin):
    pass
