"""
Campus Portal - test configuration and fixtures
"""
import os
import tempfile
import time
from typing import AsyncGenerator, Callable, Generator, Optional

# Settings are read at import time
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['SQLALCHEMY_DATABASE_URI'] = 'sqlite://'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['CELERY_TASK_ALWAYS_EAGER'] = 'true'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['EMAIL_USER'] = ''
os.environ['EMAIL_PASS'] = ''
os.environ['UPLOAD_BASE_DIR'] = tempfile.mkdtemp(prefix='campus_portal_test_')

import pytest
from faker import Faker
from httpx import AsyncClient, ASGITransport
from sqlalchemy.orm import Session

from campus_portal.main import app
from campus_portal.core.cache import cache
from campus_portal.core.database import Base, SessionLocal, engine, get_db
from campus_portal.core.roles import Role
from campus_portal.core.security import get_password_hash
from campus_portal.models import User
from campus_portal.services.auth_service import AuthService

fake = Faker()

DEFAULT_PASSWORD = 'password123'
PNG_BYTES = b'\x89PNG\r\n\x1a\n' + b'\x00' * 64


class InMemoryCache:
    """Dict-backed stand-in for the Redis cache with the same fail-open API"""

    def __init__(self):
        self.store = {}

    def _expired(self, key: str) -> bool:
        entry = self.store.get(key)
        if entry is None:
            return True
        _, expires_at = entry
        if expires_at is not None and expires_at <= time.time():
            del self.store[key]
            return True
        return False

    def get(self, key: str):
        if self._expired(key):
            return None
        return self.store[key][0]

    def set(self, key: str, value, ttl: Optional[int] = None) -> bool:
        self.store[key] = (value, time.time() + ttl if ttl else None)
        return True

    def delete(self, key: str) -> bool:
        return self.store.pop(key, None) is not None

    async def aget(self, key: str):
        return self.get(key)

    async def aset(self, key: str, value, ttl: Optional[int] = None) -> bool:
        return self.set(key, value, ttl)

    async def adelete(self, key: str) -> bool:
        return self.delete(key)

    async def aexists(self, key: str) -> bool:
        return not self._expired(key)

    async def aincr(self, key: str, ttl: int) -> int:
        count = (self.get(key) or 0) + 1
        if count == 1:
            self.set(key, count, ttl)
        else:
            self.store[key] = (count, self.store[key][1])
        return count

    def push_to_list(self, key: str, value, max_len: int, ttl: Optional[int] = None) -> int:
        values = [value] + (self.get(key) or [])
        self.set(key, values[:max_len], ttl)
        return len(values[:max_len])

    async def aget_list(self, key: str) -> list:
        return [dict(value) for value in self.get(key) or []]

    async def ahealth_check(self) -> bool:
        return True


@pytest.fixture(autouse=True)
def memory_cache(monkeypatch) -> InMemoryCache:
    fake_cache = InMemoryCache()
    for name in ('get', 'set', 'delete', 'aget', 'aset', 'adelete', 'aexists', 'aincr', 'ahealth_check',
                 'push_to_list', 'aget_list'):
        monkeypatch.setattr(cache, name, getattr(fake_cache, name))
    return fake_cache


@pytest.fixture(scope='function')
def db_session() -> Generator[Session, None, None]:
    """Fresh schema for every test"""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
async def client(db_session: Session) -> AsyncGenerator[AsyncClient, None]:
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session: Session) -> Callable[..., User]:
    def _make_user(role: Role = Role.STUDENT, verified: bool = True, active: bool = True,
                   password: str = DEFAULT_PASSWORD, **fields) -> User:
        values = {
            'email': fake.unique.email(),
            'full_name': fake.name(),
        }
        if role == Role.STUDENT:
            values['registration_number'] = fake.unique.bothify('REG-####-????')
            values['course'] = 'Computer Science'
        values.update(fields)

        user = User(
            hashed_password=get_password_hash(password),
            role=role,
            is_verified=verified,
            is_active=active,
            **values
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def student(make_user) -> User:
    return make_user(Role.STUDENT)


@pytest.fixture
def teacher(make_user) -> User:
    return make_user(Role.TEACHER)


@pytest.fixture
def admin(make_user) -> User:
    return make_user(Role.ADMIN)


@pytest.fixture
def doctor(make_user) -> User:
    return make_user(Role.DOCTOR)


def auth_headers(user: User) -> dict:
    return {'Authorization': f'Bearer {AuthService.issue_token(user)}'}


def png_file(name: str = 'proof.png') -> tuple:
    return (name, PNG_BYTES, 'image/png')
