from datetime import datetime
from typing import Dict, Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..core.roles import Role
from ..models.election import Election, ElectionStatus
from ..models.user import User
from .application_service import ApplicationService
from .complaint_service import ComplaintService


class AdminService:
    def __init__(self, db: Session):
        self.db = db

    def dashboard_stats(self) -> Dict[str, Any]:
        per_role = dict(self.db.query(User.role, func.count(User.id)).group_by(User.role).all())
        users = {role.value: per_role.get(role, 0) for role in Role}

        pending_verifications = (
            self.db.query(User)
            .filter(User.is_verified.is_(False), User.is_active.is_(True))
            .count()
        )

        now = datetime.utcnow()
        elections = {ElectionStatus.UPCOMING: 0, ElectionStatus.ACTIVE: 0, ElectionStatus.COMPLETED: 0}
        for election in self.db.query(Election).all():
            elections[election.status_at(now)] += 1

        return {
            "users": users,
            "pending_verifications": pending_verifications,
            "elections": elections,
            "open_complaints": ComplaintService(self.db).count_open(),
            "pending_applications": ApplicationService(self.db).count_pending(),
        }
