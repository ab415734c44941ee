from fastapi import APIRouter

from .endpoints import auth, users, elections, complaints, applications, cheating_records, admin, health

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(elections.router, prefix="/elections", tags=["elections"])
api_router.include_router(complaints.router, prefix="/complaints", tags=["complaints"])
api_router.include_router(applications.router, prefix="/applications", tags=["applications"])
api_router.include_router(cheating_records.router, prefix="/cheating-records", tags=["cheating-records"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
api_router.include_router(health.router, prefix="/health", tags=["health"])
