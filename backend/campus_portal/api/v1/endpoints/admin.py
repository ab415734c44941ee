from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from ....core.database import get_db
from ....core.roles import Role
from ....api.deps import get_current_admin
from ....models.user import User
from ....schemas.user import User as UserSchema, StaffCreate, AccountVerification
from ....services.admin_service import AdminService
from ....services.user_service import UserService
from ....tasks.notifications import notify_user

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/dashboard")
async def get_dashboard(
    current_user: User = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    return AdminService(db).dashboard_stats()


@router.get("/users", response_model=List[UserSchema])
async def list_users(
    role: Optional[Role] = None,
    verified: Optional[bool] = None,
    current_user: User = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    return UserService(db).list_users(role=role, verified=verified)


@router.get("/pending-accounts", response_model=List[UserSchema])
async def list_pending_accounts(
    current_user: User = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    return [user for user in UserService(db).list_users(verified=False) if user.is_active]


@router.patch("/users/{user_id}/verify", response_model=UserSchema)
async def verify_account(
    user_id: int,
    decision: AccountVerification,
    current_user: User = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    if user_id == current_user.id:
        raise HTTPException(status_code=400, detail="You cannot change your own verification")

    user = UserService(db).set_verification(user_id, decision.approved)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    logger.info(f"Admin {current_user.id} {'approved' if decision.approved else 'rejected'} account {user_id}")
    if decision.approved:
        notify_user(user, "account_verified", "Account verified",
                    "Your campus portal account has been verified.")
    return user


@router.post("/users", response_model=UserSchema, status_code=status.HTTP_201_CREATED)
async def create_staff_account(
    user_data: StaffCreate,
    current_user: User = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    if user_data.role == Role.STUDENT:
        raise HTTPException(status_code=400, detail="Students register through the portal")

    try:
        user = UserService(db).create_user(user_data, role=user_data.role)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(f"Admin {current_user.id} created {user.role.value} account {user.id}")
    return user
