from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Integer
from sqlalchemy.orm import relationship

from .base import BaseModel


class ComplaintStatus:
    PENDING = "pending"
    IN_REVIEW = "in_review"
    RESOLVED = "resolved"
    REJECTED = "rejected"

    ALL = (PENDING, IN_REVIEW, RESOLVED, REJECTED)
    CLOSED = (RESOLVED, REJECTED)


class Complaint(BaseModel):
    __tablename__ = "complaints"

    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String, nullable=False, default="general")
    attachment = Column(String, nullable=True)
    status = Column(String, nullable=False, default=ComplaintStatus.PENDING, index=True)
    admin_response = Column(Text, nullable=True)
    resolved_at = Column(DateTime, nullable=True)

    student = relationship("User", back_populates="complaints", foreign_keys=[student_id])
