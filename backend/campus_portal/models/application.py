from sqlalchemy import Column, String, Text, Date, DateTime, ForeignKey, Integer
from sqlalchemy.orm import relationship

from .base import BaseModel


class ApplicationType:
    LEAVE = "leave"
    MEDICAL = "medical"
    BONAFIDE = "bonafide"
    OTHER = "other"

    ALL = (LEAVE, MEDICAL, BONAFIDE, OTHER)


class ApplicationStatus:
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    DECISIONS = (APPROVED, REJECTED)


class Application(BaseModel):
    __tablename__ = "applications"

    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    application_type = Column(String, nullable=False, index=True)
    subject = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    from_date = Column(Date, nullable=True)
    to_date = Column(Date, nullable=True)
    proof = Column(String, nullable=True)
    status = Column(String, nullable=False, default=ApplicationStatus.PENDING, index=True)
    reviewed_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    reviewer_remarks = Column(Text, nullable=True)
    reviewed_at = Column(DateTime, nullable=True)

    student = relationship("User", back_populates="applications", foreign_keys=[student_id])
    reviewed_by = relationship("User", foreign_keys=[reviewed_by_id])
