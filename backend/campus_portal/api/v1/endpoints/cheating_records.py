from fastapi import APIRouter, Depends, HTTPException, File, Form, UploadFile, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from ....core.database import get_db
from ....api.deps import get_current_admin, get_current_faculty, get_current_student
from ....models.user import User
from ....schemas.cheating_record import CheatingRecord
from ....services.cheating_record_service import CheatingRecordService
from ....tasks.notifications import notify_cheating_record
from ....utils.file_paths import FileTypes
from ....utils.uploads import save_image_upload, remove_upload

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("", response_model=CheatingRecord, status_code=status.HTTP_201_CREATED)
async def create_cheating_record(
    student_id: int = Form(...),
    name: str = Form(...),
    registration_number: str = Form(...),
    course: str = Form(...),
    reason: Optional[str] = Form(None),
    proof: UploadFile = File(...),
    current_user: User = Depends(get_current_faculty),
    db: Session = Depends(get_db)
):
    proof_path = None
    try:
        proof_path = await save_image_upload(proof, FileTypes.PROOFS)
        record = CheatingRecordService(db).create_record(
            student_id=student_id,
            name=name,
            registration_number=registration_number,
            proof=proof_path,
            course=course,
            reason=reason,
            reported_by=current_user,
        )
    except LookupError as e:
        remove_upload(proof_path)
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        remove_upload(proof_path)
        raise HTTPException(status_code=400, detail=str(e))

    notify_cheating_record(record)
    return record


@router.get("", response_model=List[CheatingRecord])
async def list_cheating_records(
    student_id: Optional[int] = None,
    course: Optional[str] = None,
    current_user: User = Depends(get_current_faculty),
    db: Session = Depends(get_db)
):
    return CheatingRecordService(db).list_records(student_id=student_id, course=course)


@router.get("/mine", response_model=List[CheatingRecord])
async def list_my_cheating_records(
    current_user: User = Depends(get_current_student),
    db: Session = Depends(get_db)
):
    return CheatingRecordService(db).list_records(student_id=current_user.id)


@router.get("/{record_id}", response_model=CheatingRecord)
async def get_cheating_record(
    record_id: int,
    current_user: User = Depends(get_current_faculty),
    db: Session = Depends(get_db)
):
    record = CheatingRecordService(db).get_record(record_id)
    if not record:
        raise HTTPException(status_code=404, detail="Cheating record not found")
    return record


@router.delete("/{record_id}")
async def delete_cheating_record(
    record_id: int,
    current_user: User = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    record = CheatingRecordService(db).delete_record(record_id)
    if not record:
        raise HTTPException(status_code=404, detail="Cheating record not found")
    remove_upload(record.proof)
    logger.info(f"Cheating record {record_id} deleted by admin {current_user.id}")
    return {"success": True, "message": "Cheating record deleted"}
