from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import Optional, List, Union

from ..models.user import User
from ..schemas.user import StudentCreate, TeacherCreate, StaffCreate, UserUpdate
from ..core.security import get_password_hash, verify_password
from ..core.roles import Role


class UserService:
    def __init__(self, db: Session):
        self.db = db

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email.lower()).first()

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_user_by_registration_number(self, registration_number: str) -> Optional[User]:
        return self.db.query(User).filter(User.registration_number == registration_number).first()

    def get_student(self, student_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == student_id, User.role == Role.STUDENT).first()

    def list_users(self, role: Optional[Role] = None, verified: Optional[bool] = None) -> List[User]:
        query = self.db.query(User)
        if role is not None:
            query = query.filter(User.role == role)
        if verified is not None:
            query = query.filter(User.is_verified == verified)
        return query.order_by(User.created_at.desc()).all()

    def create_user(self, user_data: Union[StudentCreate, TeacherCreate, StaffCreate], role: Role) -> User:
        if self.get_user_by_email(user_data.email):
            raise ValueError("Email already registered")

        registration_number = getattr(user_data, "registration_number", None)
        if role == Role.STUDENT:
            if not registration_number:
                raise ValueError("Registration number is required")
            if self.get_user_by_registration_number(registration_number):
                raise ValueError("Registration number already registered")

        db_user = User(
            full_name=user_data.full_name,
            email=user_data.email.lower(),
            hashed_password=get_password_hash(user_data.password),
            role=role,
            phone=user_data.phone,
            registration_number=registration_number,
            course=getattr(user_data, "course", None),
            department=getattr(user_data, "department", None),
            year=getattr(user_data, "year", None),
            # Staff created by an admin are trusted immediately
            is_verified=isinstance(user_data, StaffCreate),
        )
        self.db.add(db_user)
        try:
            self.db.commit()
            self.db.refresh(db_user)
            return db_user
        except IntegrityError as e:
            self.db.rollback()
            raise ValueError("Account already registered") from e

    def update_user(self, user_id: int, user_data: UserUpdate) -> Optional[User]:
        db_user = self.get_user_by_id(user_id)
        if not db_user:
            return None

        update_data = user_data.model_dump(exclude_unset=True)
        if "password" in update_data:
            update_data["hashed_password"] = get_password_hash(update_data.pop("password"))

        for field, value in update_data.items():
            setattr(db_user, field, value)

        self.db.commit()
        self.db.refresh(db_user)
        return db_user

    def authenticate_user(self, email: str, password: str, role: Optional[Role] = None) -> Optional[User]:
        user = self.get_user_by_email(email)
        if not user or not verify_password(password, user.hashed_password):
            return None
        if role is not None and user.role != role:
            return None
        if not user.is_active:
            return None
        return user

    def set_verification(self, user_id: int, approved: bool) -> Optional[User]:
        """Approve an account, or deactivate it when the admin rejects it"""
        user = self.get_user_by_id(user_id)
        if not user:
            return None
        if approved:
            user.is_verified = True
            user.is_active = True
        else:
            user.is_verified = False
            user.is_active = False
        self.db.commit()
        self.db.refresh(user)
        return user
