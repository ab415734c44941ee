from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Dict, Any

from ....core.cache import cache
from ....core.database import get_db
from ....api.deps import get_current_user
from ....models.user import User
from ....schemas.user import User as UserSchema, UserUpdate
from ....services.user_service import UserService
from ....tasks.notifications import NOTIFICATION_TTL, notifications_key, notifications_read_key

router = APIRouter()


@router.get("/me", response_model=UserSchema)
async def read_users_me(
    current_user: User = Depends(get_current_user)
):
    return current_user


@router.patch("/me", response_model=UserSchema)
async def update_users_me(
    user_data: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return UserService(db).update_user(current_user.id, user_data)


@router.get("/me/notifications", response_model=List[Dict[str, Any]])
async def read_my_notifications(
    current_user: User = Depends(get_current_user)
):
    notifications = await cache.aget_list(notifications_key(current_user.id))
    read_at = await cache.aget(notifications_read_key(current_user.id))
    for notification in notifications:
        notification["read"] = bool(read_at) and notification.get("timestamp", "") <= read_at
    return notifications


@router.post("/me/notifications/read")
async def mark_notifications_read(
    current_user: User = Depends(get_current_user)
):
    # Everything pushed up to now counts as read
    notifications = await cache.aget_list(notifications_key(current_user.id))
    await cache.aset(notifications_read_key(current_user.id), datetime.utcnow().isoformat(), ttl=NOTIFICATION_TTL)
    return {"success": True, "count": len(notifications)}
