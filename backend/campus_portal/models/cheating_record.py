from sqlalchemy import Column, String, Text, ForeignKey, Integer
from sqlalchemy.orm import relationship

from .base import BaseModel


class CheatingRecord(BaseModel):
    """Disciplinary record linking a student to a proctoring incident"""
    __tablename__ = "cheating_records"

    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    registration_number = Column(String, nullable=False, index=True)
    reason = Column(Text, nullable=True)
    proof = Column(String, nullable=False)
    course = Column(String, nullable=False, index=True)
    reported_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    student = relationship("User", back_populates="cheating_records", foreign_keys=[student_id])
    reported_by = relationship("User", foreign_keys=[reported_by_id])

    def __repr__(self):
        return f"<CheatingRecord {self.registration_number} ({self.course})>"
