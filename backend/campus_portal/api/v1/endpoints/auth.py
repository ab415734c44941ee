"""
Authentication endpoints.

Each role gets register (students and teachers only), login, logout and
check-auth routes generated from ``ROLE_ROUTES``; the handlers differ only in
the role they enforce.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ....core.config import settings
from ....core.database import get_db
from ....core.roles import Role, ROLE_ROUTES, GENERIC_CHECK_AUTH
from ....core.security import get_token_from_request
from ....schemas.auth import LoginRequest, AuthResponse, CheckAuthResponse, MessageResponse
from ....schemas.user import User as UserSchema, StudentCreate, TeacherCreate
from ....services.auth_service import AuthService
from ....services.user_service import UserService

router = APIRouter()
logger = logging.getLogger(__name__)

REGISTRATION_SCHEMAS = {
    Role.STUDENT: StudentCreate,
    Role.TEACHER: TeacherCreate,
}


def _local_path(path: str) -> str:
    # ROLE_ROUTES paths include the /auth mount prefix
    return path[len("/auth"):] if path.startswith("/auth") else path


def set_auth_cookie(response: Response, token: str):
    response.set_cookie(
        key=settings.cookie_name,
        value=token,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
        max_age=settings.access_token_expire_minutes * 60,
    )


def clear_auth_cookie(response: Response):
    response.delete_cookie(
        key=settings.cookie_name,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
    )


def _unauthorised(message: str = "Unauthorised user!", clear_cookie: bool = True) -> JSONResponse:
    response = JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"success": False, "message": message},
    )
    if clear_cookie:
        clear_auth_cookie(response)
    return response


def _make_register(role: Role, schema):
    async def register(user_data: schema, response: Response, db: Session = Depends(get_db)):
        user_service = UserService(db)
        try:
            user = user_service.create_user(user_data, role=role)
        except ValueError as e:
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={"success": False, "message": str(e)},
            )

        token = AuthService.issue_token(user)
        set_auth_cookie(response, token)
        logger.info(f"Registered {role.value} account {user.id}")
        return AuthResponse(
            success=True,
            message="Registration successful",
            user=UserSchema.model_validate(user),
            token=token,
        )

    register.__name__ = f"register_{role.value}"
    return register


def _make_login(role: Role):
    async def login(credentials: LoginRequest, response: Response, db: Session = Depends(get_db)):
        result = AuthService(db).login(credentials.email, credentials.password, role=role)
        if result is None:
            return _unauthorised("Invalid email or password")

        user, token = result
        set_auth_cookie(response, token)
        return AuthResponse(
            success=True,
            message="Logged in successfully",
            user=UserSchema.model_validate(user),
            token=token,
        )

    login.__name__ = f"login_{role.value}"
    return login


def _make_logout(role: Role):
    async def logout(request: Request, response: Response):
        await AuthService.revoke_token(get_token_from_request(request))
        clear_auth_cookie(response)
        return MessageResponse(success=True, message="Logged out successfully!")

    logout.__name__ = f"logout_{role.value}"
    return logout


def _make_check_auth(role: Optional[Role]):
    async def check_auth(request: Request, response: Response, db: Session = Depends(get_db)):
        # Never let an intermediary cache the session state
        response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, proxy-revalidate"
        user = await AuthService(db).get_user_from_token(get_token_from_request(request))
        if user is None:
            return _unauthorised()
        # A valid session of another role keeps its cookie
        if role is not None and user.role != role:
            return _unauthorised(clear_cookie=False)
        return CheckAuthResponse(success=True, user=UserSchema.model_validate(user))

    check_auth.__name__ = f"check_auth_{role.value}" if role else "check_auth"
    return check_auth


for _role, _routes in ROLE_ROUTES.items():
    if _routes.can_self_register:
        router.add_api_route(
            _local_path(_routes.register),
            _make_register(_role, REGISTRATION_SCHEMAS[_role]),
            methods=["POST"],
            response_model=AuthResponse,
            status_code=status.HTTP_201_CREATED,
        )
    router.add_api_route(
        _local_path(_routes.login), _make_login(_role), methods=["POST"], response_model=AuthResponse
    )
    router.add_api_route(
        _local_path(_routes.logout), _make_logout(_role), methods=["POST"], response_model=MessageResponse
    )
    router.add_api_route(
        _local_path(_routes.check_auth), _make_check_auth(_role), methods=["GET"], response_model=CheckAuthResponse
    )

router.add_api_route(
    _local_path(GENERIC_CHECK_AUTH), _make_check_auth(None), methods=["GET"], response_model=CheckAuthResponse
)
