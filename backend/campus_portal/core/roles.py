"""
Role definitions shared by the auth router and the client auth store.

Every role gets the same register/login/logout/check-auth cycle; only the
paths differ, so both sides are generated from ROLE_ROUTES.
"""
import enum
from dataclasses import dataclass
from typing import Optional


class Role(str, enum.Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"
    DOCTOR = "doctor"


@dataclass(frozen=True)
class RoleRoutes:
    role: Role
    login: str
    logout: str
    check_auth: str
    register: Optional[str] = None

    @property
    def can_self_register(self) -> bool:
        return self.register is not None


ROLE_ROUTES = {
    Role.STUDENT: RoleRoutes(
        role=Role.STUDENT,
        register="/auth/register",
        login="/auth/login",
        logout="/auth/logout",
        check_auth="/auth/check-auth-student",
    ),
    Role.TEACHER: RoleRoutes(
        role=Role.TEACHER,
        register="/auth/teacher-register",
        login="/auth/teacher-login",
        logout="/auth/teacher-logout",
        check_auth="/auth/check-auth-teacher",
    ),
    Role.ADMIN: RoleRoutes(
        role=Role.ADMIN,
        login="/auth/admin-login",
        logout="/auth/admin-logout",
        check_auth="/auth/check-auth-admin",
    ),
    Role.DOCTOR: RoleRoutes(
        role=Role.DOCTOR,
        login="/auth/doctor-login",
        logout="/auth/doctor-logout",
        check_auth="/auth/check-auth-doctor",
    ),
}

# Role is inferred from the token
GENERIC_CHECK_AUTH = "/auth/check-auth"


def parse_role(value) -> Optional[Role]:
    if isinstance(value, Role):
        return value
    try:
        return Role(value)
    except ValueError:
        return None
