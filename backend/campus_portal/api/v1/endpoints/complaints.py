from fastapi import APIRouter, Depends, HTTPException, File, Form, UploadFile, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from ....core.database import get_db
from ....core.roles import Role
from ....api.deps import get_current_user, get_current_admin, get_current_student
from ....models.user import User
from ....schemas.complaint import Complaint, ComplaintUpdate
from ....services.complaint_service import ComplaintService
from ....tasks.notifications import notify_complaint_update
from ....utils.file_paths import FileTypes
from ....utils.uploads import save_image_upload, remove_upload

router = APIRouter()


@router.post("", response_model=Complaint, status_code=status.HTTP_201_CREATED)
async def create_complaint(
    title: str = Form(...),
    description: str = Form(...),
    category: str = Form("general"),
    attachment: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_student),
    db: Session = Depends(get_db)
):
    attachment_path = None
    try:
        if attachment is not None and attachment.filename:
            attachment_path = await save_image_upload(attachment, FileTypes.COMPLAINTS)
        return ComplaintService(db).create_complaint(
            current_user, title, description, category, attachment_path
        )
    except ValueError as e:
        remove_upload(attachment_path)
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/mine", response_model=List[Complaint])
async def list_my_complaints(
    current_user: User = Depends(get_current_student),
    db: Session = Depends(get_db)
):
    return ComplaintService(db).list_for_student(current_user.id)


@router.get("", response_model=List[Complaint])
async def list_complaints(
    complaint_status: Optional[str] = Query(None, alias="status"),
    category: Optional[str] = None,
    current_user: User = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    return ComplaintService(db).list_complaints(status=complaint_status, category=category)


@router.get("/{complaint_id}", response_model=Complaint)
async def get_complaint(
    complaint_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    complaint = ComplaintService(db).get_complaint(complaint_id)
    if not complaint or (current_user.role != Role.ADMIN and complaint.student_id != current_user.id):
        raise HTTPException(status_code=404, detail="Complaint not found")
    return complaint


@router.patch("/{complaint_id}", response_model=Complaint)
async def update_complaint(
    complaint_id: int,
    update: ComplaintUpdate,
    current_user: User = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    try:
        complaint = ComplaintService(db).update_status(complaint_id, update.status, update.admin_response)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not complaint:
        raise HTTPException(status_code=404, detail="Complaint not found")

    notify_complaint_update(complaint)
    return complaint
