from .auth import AuthState, AuthStore
from .storage import SessionStorage

__all__ = ["AuthState", "AuthStore", "SessionStorage"]
