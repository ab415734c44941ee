import logging
from sqlalchemy.orm import Session
from typing import Optional, Tuple

from ..core.cache import cache
from ..core.roles import Role
from ..core.security import create_access_token, decode_token, token_ttl_seconds
from ..models.user import User
from .user_service import UserService

logger = logging.getLogger(__name__)


def _revocation_key(jti: str) -> str:
    return f"revoked_token:{jti}"


class AuthService:
    def __init__(self, db: Session):
        self.db = db
        self.user_service = UserService(db)

    @staticmethod
    def issue_token(user: User) -> str:
        return create_access_token(data={"sub": str(user.id), "role": user.role.value})

    def login(self, email: str, password: str, role: Role) -> Optional[Tuple[User, str]]:
        user = self.user_service.authenticate_user(email, password, role=role)
        if not user:
            logger.info(f"Failed {role.value} login for {email}")
            return None
        logger.info(f"User {user.id} logged in as {role.value}")
        return user, self.issue_token(user)

    async def get_user_from_token(self, token: Optional[str], role: Optional[Role] = None) -> Optional[User]:
        """Resolve a token to an active user, honouring revocation and an optional expected role"""
        if not token:
            return None
        payload = decode_token(token)
        if payload is None:
            return None

        jti = payload.get("jti")
        if jti and await cache.aexists(_revocation_key(jti)):
            return None

        if role is not None and payload.get("role") != role.value:
            return None

        try:
            user_id = int(payload["sub"])
        except (TypeError, ValueError):
            return None

        user = self.user_service.get_user_by_id(user_id)
        if not user or not user.is_active:
            return None
        if role is not None and user.role != role:
            return None
        return user

    @staticmethod
    async def revoke_token(token: Optional[str]) -> bool:
        if not token:
            return False
        payload = decode_token(token)
        if payload is None or not payload.get("jti"):
            return False
        ttl = token_ttl_seconds(payload)
        if ttl <= 0:
            return False
        return await cache.aset(_revocation_key(payload["jti"]), True, ttl=ttl)
