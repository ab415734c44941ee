from datetime import datetime
from typing import Optional, List

from sqlalchemy.orm import Session

from ..models.complaint import Complaint, ComplaintStatus
from ..models.user import User


class ComplaintService:
    def __init__(self, db: Session):
        self.db = db

    def create_complaint(self, student: User, title: str, description: str,
                         category: str = "general", attachment: Optional[str] = None) -> Complaint:
        if not title.strip() or not description.strip():
            raise ValueError("Title and description are required")

        complaint = Complaint(
            student_id=student.id,
            title=title.strip(),
            description=description.strip(),
            category=(category or "general").strip().lower(),
            attachment=attachment,
            status=ComplaintStatus.PENDING,
        )
        self.db.add(complaint)
        self.db.commit()
        self.db.refresh(complaint)
        return complaint

    def get_complaint(self, complaint_id: int) -> Optional[Complaint]:
        return self.db.query(Complaint).filter(Complaint.id == complaint_id).first()

    def list_for_student(self, student_id: int) -> List[Complaint]:
        return (
            self.db.query(Complaint)
            .filter(Complaint.student_id == student_id)
            .order_by(Complaint.created_at.desc())
            .all()
        )

    def list_complaints(self, status: Optional[str] = None, category: Optional[str] = None) -> List[Complaint]:
        query = self.db.query(Complaint)
        if status:
            query = query.filter(Complaint.status == status)
        if category:
            query = query.filter(Complaint.category == category.lower())
        return query.order_by(Complaint.created_at.desc()).all()

    def update_status(self, complaint_id: int, status: str, admin_response: Optional[str] = None) -> Optional[Complaint]:
        if status not in ComplaintStatus.ALL:
            raise ValueError(f"Invalid complaint status: {status}")

        complaint = self.get_complaint(complaint_id)
        if not complaint:
            return None

        complaint.status = status
        if admin_response is not None:
            complaint.admin_response = admin_response
        complaint.resolved_at = datetime.utcnow() if status in ComplaintStatus.CLOSED else None

        self.db.commit()
        self.db.refresh(complaint)
        return complaint

    def count_open(self) -> int:
        return self.db.query(Complaint).filter(Complaint.status.notin_(ComplaintStatus.CLOSED)).count()
