from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Optional


class ApplicationReview(BaseModel):
    status: str = Field(..., pattern="^(approved|rejected)$")
    remarks: Optional[str] = None


class Application(BaseModel):
    id: int
    student_id: int
    application_type: str
    subject: str
    description: str
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    proof: Optional[str] = None
    status: str
    reviewed_by_id: Optional[int] = None
    reviewer_remarks: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True
