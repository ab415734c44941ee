from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from ..core.database import get_db
from ..core.roles import Role
from ..core.security import get_token_from_request
from ..services.auth_service import AuthService
from ..models.user import User


async def get_current_user(
    request: Request,
    db: Session = Depends(get_db)
) -> User:
    auth_service = AuthService(db)
    user = await auth_service.get_user_from_token(get_token_from_request(request))

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorised user!",
        )

    return user


def require_roles(*roles: Role):
    """Dependency factory: the current user must hold one of ``roles``"""
    allowed = set(roles)

    async def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="The user doesn't have enough privileges"
            )
        return current_user

    return checker


get_current_student = require_roles(Role.STUDENT)
get_current_admin = require_roles(Role.ADMIN)
get_current_faculty = require_roles(Role.TEACHER, Role.ADMIN)
get_current_reviewer = require_roles(Role.ADMIN, Role.DOCTOR)
