from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class CheatingRecord(BaseModel):
    id: int
    student_id: int
    name: str
    registration_number: str
    reason: Optional[str] = None
    proof: str
    course: str
    reported_by_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
