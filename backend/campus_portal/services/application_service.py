from datetime import date, datetime
from typing import Optional, List

from sqlalchemy.orm import Session

from ..core.roles import Role
from ..models.application import Application, ApplicationType, ApplicationStatus
from ..models.user import User


class ApplicationService:
    def __init__(self, db: Session):
        self.db = db

    def create_application(self, student: User, application_type: str, subject: str, description: str,
                           from_date: Optional[date] = None, to_date: Optional[date] = None,
                           proof: Optional[str] = None) -> Application:
        application_type = (application_type or "").strip().lower()
        if application_type not in ApplicationType.ALL:
            raise ValueError(f"Invalid application type. Allowed: {', '.join(ApplicationType.ALL)}")
        if not subject.strip() or not description.strip():
            raise ValueError("Subject and description are required")
        if from_date and to_date and to_date < from_date:
            raise ValueError("to_date cannot be before from_date")

        application = Application(
            student_id=student.id,
            application_type=application_type,
            subject=subject.strip(),
            description=description.strip(),
            from_date=from_date,
            to_date=to_date,
            proof=proof,
            status=ApplicationStatus.PENDING,
        )
        self.db.add(application)
        self.db.commit()
        self.db.refresh(application)
        return application

    def get_application(self, application_id: int) -> Optional[Application]:
        return self.db.query(Application).filter(Application.id == application_id).first()

    def list_for_student(self, student_id: int) -> List[Application]:
        return (
            self.db.query(Application)
            .filter(Application.student_id == student_id)
            .order_by(Application.created_at.desc())
            .all()
        )

    def list_for_reviewer(self, reviewer: User, status: Optional[str] = None,
                          application_type: Optional[str] = None) -> List[Application]:
        query = self.db.query(Application)
        # Doctors only ever see medical applications
        if reviewer.role == Role.DOCTOR:
            query = query.filter(Application.application_type == ApplicationType.MEDICAL)
        elif application_type:
            query = query.filter(Application.application_type == application_type)
        if status:
            query = query.filter(Application.status == status)
        return query.order_by(Application.created_at.desc()).all()

    @staticmethod
    def can_review(reviewer: User, application: Application) -> bool:
        if reviewer.role == Role.ADMIN:
            return True
        if reviewer.role == Role.DOCTOR:
            return application.application_type == ApplicationType.MEDICAL
        return False

    def review(self, application: Application, reviewer: User, status: str,
               remarks: Optional[str] = None) -> Application:
        if status not in ApplicationStatus.DECISIONS:
            raise ValueError(f"Invalid decision: {status}")
        if application.status != ApplicationStatus.PENDING:
            raise ValueError("Application has already been reviewed")

        application.status = status
        application.reviewer_remarks = remarks
        application.reviewed_by_id = reviewer.id
        application.reviewed_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(application)
        return application

    def count_pending(self) -> int:
        return self.db.query(Application).filter(Application.status == ApplicationStatus.PENDING).count()
