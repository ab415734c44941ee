from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class ComplaintUpdate(BaseModel):
    status: str = Field(..., pattern="^(pending|in_review|resolved|rejected)$")
    admin_response: Optional[str] = None


class Complaint(BaseModel):
    id: int
    student_id: int
    title: str
    description: str
    category: str
    attachment: Optional[str] = None
    status: str
    admin_response: Optional[str] = None
    resolved_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
