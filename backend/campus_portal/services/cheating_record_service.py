import logging
from typing import Optional, List

from sqlalchemy.orm import Session

from ..core.roles import Role
from ..models.cheating_record import CheatingRecord
from ..models.user import User

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "registration_number", "proof", "course")


class CheatingRecordService:
    def __init__(self, db: Session):
        self.db = db

    def create_record(self, student_id: int, name: str, registration_number: str, proof: str,
                      course: str, reason: Optional[str] = None,
                      reported_by: Optional[User] = None) -> CheatingRecord:
        values = {
            "name": name,
            "registration_number": registration_number,
            "proof": proof,
            "course": course,
        }
        missing = [field for field in REQUIRED_FIELDS if not (values[field] or "").strip()]
        if missing:
            raise ValueError(f"Missing required fields: {', '.join(missing)}")

        student = self.db.query(User).filter(User.id == student_id).first()
        if not student or student.role != Role.STUDENT:
            raise LookupError("Student not found")

        record = CheatingRecord(
            student_id=student.id,
            name=name.strip(),
            registration_number=registration_number.strip(),
            reason=(reason or "").strip() or None,
            proof=proof,
            course=course.strip(),
            reported_by_id=reported_by.id if reported_by else None,
        )
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        logger.info(f"Cheating record {record.id} filed for student {student.id}")
        return record

    def get_record(self, record_id: int) -> Optional[CheatingRecord]:
        return self.db.query(CheatingRecord).filter(CheatingRecord.id == record_id).first()

    def list_records(self, student_id: Optional[int] = None, course: Optional[str] = None) -> List[CheatingRecord]:
        query = self.db.query(CheatingRecord)
        if student_id is not None:
            query = query.filter(CheatingRecord.student_id == student_id)
        if course:
            query = query.filter(CheatingRecord.course == course)
        return query.order_by(CheatingRecord.created_at.desc()).all()

    def delete_record(self, record_id: int) -> Optional[CheatingRecord]:
        record = self.get_record(record_id)
        if not record:
            return None
        self.db.delete(record)
        self.db.commit()
        return record
