from datetime import date
from fastapi import APIRouter, Depends, HTTPException, File, Form, UploadFile, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from ....core.database import get_db
from ....core.roles import Role
from ....api.deps import get_current_user, get_current_student, get_current_reviewer
from ....models.user import User
from ....schemas.application import Application, ApplicationReview
from ....services.application_service import ApplicationService
from ....tasks.notifications import notify_application_decision
from ....utils.file_paths import FileTypes
from ....utils.uploads import save_image_upload, remove_upload

router = APIRouter()


@router.post("", response_model=Application, status_code=status.HTTP_201_CREATED)
async def submit_application(
    application_type: str = Form(...),
    subject: str = Form(...),
    description: str = Form(...),
    from_date: Optional[date] = Form(None),
    to_date: Optional[date] = Form(None),
    proof: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_student),
    db: Session = Depends(get_db)
):
    proof_path = None
    try:
        if proof is not None and proof.filename:
            proof_path = await save_image_upload(proof, FileTypes.APPLICATIONS)
        return ApplicationService(db).create_application(
            current_user, application_type, subject, description, from_date, to_date, proof_path
        )
    except ValueError as e:
        remove_upload(proof_path)
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/mine", response_model=List[Application])
async def list_my_applications(
    current_user: User = Depends(get_current_student),
    db: Session = Depends(get_db)
):
    return ApplicationService(db).list_for_student(current_user.id)


@router.get("", response_model=List[Application])
async def list_applications(
    application_status: Optional[str] = Query(None, alias="status"),
    application_type: Optional[str] = Query(None, alias="type"),
    current_user: User = Depends(get_current_reviewer),
    db: Session = Depends(get_db)
):
    return ApplicationService(db).list_for_reviewer(
        current_user, status=application_status, application_type=application_type
    )


@router.get("/{application_id}", response_model=Application)
async def get_application(
    application_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = ApplicationService(db)
    application = service.get_application(application_id)
    if application:
        if current_user.role == Role.STUDENT and application.student_id == current_user.id:
            return application
        if service.can_review(current_user, application):
            return application
    raise HTTPException(status_code=404, detail="Application not found")


@router.patch("/{application_id}/review", response_model=Application)
async def review_application(
    application_id: int,
    review: ApplicationReview,
    current_user: User = Depends(get_current_reviewer),
    db: Session = Depends(get_db)
):
    service = ApplicationService(db)
    application = service.get_application(application_id)
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")
    if not service.can_review(current_user, application):
        raise HTTPException(status_code=403, detail="You cannot review this application")

    try:
        application = service.review(application, current_user, review.status, review.remarks)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    notify_application_decision(application)
    return application
