from sqlalchemy import Column, String, Boolean, Enum
from sqlalchemy.orm import relationship

from .base import BaseModel
from ..core.roles import Role


class User(BaseModel):
    """Identity record for every role; student-only fields stay null for staff."""
    __tablename__ = "users"

    full_name = Column(String, nullable=False, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(Enum(Role, values_callable=lambda roles: [r.value for r in roles], name="user_role"),
                  nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)

    registration_number = Column(String, unique=True, index=True, nullable=True)
    course = Column(String, nullable=True)
    department = Column(String, nullable=True)
    year = Column(String, nullable=True)
    phone = Column(String, nullable=True)

    complaints = relationship("Complaint", back_populates="student", foreign_keys="Complaint.student_id")
    applications = relationship("Application", back_populates="student", foreign_keys="Application.student_id")
    cheating_records = relationship("CheatingRecord", back_populates="student",
                                    foreign_keys="CheatingRecord.student_id")

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def __repr__(self):
        return f"<User {self.email} ({self.role.value if self.role else None})>"
