from fastapi import APIRouter, Depends, HTTPException, File, Form, UploadFile, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from ....core.database import get_db
from ....core.roles import Role
from ....api.deps import get_current_user, get_current_admin, get_current_student
from ....models.election import ElectionStatus, CandidateStatus
from ....models.user import User
from ....schemas.election import (
    Election, ElectionCreate, ElectionUpdate, Candidate, CandidateReview,
    VoteCreate, VoteReceipt, ElectionResults
)
from ....services.election_service import ElectionService, DuplicateVoteError
from ....utils.file_paths import FileTypes
from ....utils.uploads import save_image_upload, remove_upload

router = APIRouter()
logger = logging.getLogger(__name__)


def _get_election_or_404(service: ElectionService, election_id: int):
    election = service.get_election(election_id)
    if not election:
        raise HTTPException(status_code=404, detail="Election not found")
    return election


@router.get("", response_model=List[Election])
async def list_elections(
    election_status: Optional[str] = Query(None, alias="status"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ElectionService(db).list_elections(status=election_status)


@router.post("", response_model=Election, status_code=status.HTTP_201_CREATED)
async def create_election(
    data: ElectionCreate,
    current_user: User = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    return ElectionService(db).create_election(data, created_by=current_user)


@router.get("/{election_id}", response_model=Election)
async def get_election(
    election_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return _get_election_or_404(ElectionService(db), election_id)


@router.patch("/{election_id}", response_model=Election)
async def update_election(
    election_id: int,
    data: ElectionUpdate,
    current_user: User = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    try:
        election = ElectionService(db).update_election(election_id, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not election:
        raise HTTPException(status_code=404, detail="Election not found")
    return election


@router.delete("/{election_id}")
async def delete_election(
    election_id: int,
    current_user: User = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    if not ElectionService(db).delete_election(election_id):
        raise HTTPException(status_code=404, detail="Election not found")
    return {"success": True, "message": "Election deleted"}


@router.get("/{election_id}/candidates", response_model=List[Candidate])
async def list_candidates(
    election_id: int,
    candidate_status: Optional[str] = Query(None, alias="status"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = ElectionService(db)
    _get_election_or_404(service, election_id)
    # Only admins see pending and rejected candidacies
    if current_user.role != Role.ADMIN:
        candidate_status = CandidateStatus.APPROVED
    return service.list_candidates(election_id, status=candidate_status)


@router.post("/{election_id}/candidates", response_model=Candidate, status_code=status.HTTP_201_CREATED)
async def register_candidate(
    election_id: int,
    manifesto: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_student),
    db: Session = Depends(get_db)
):
    service = ElectionService(db)
    _get_election_or_404(service, election_id)

    photo_path = None
    try:
        if photo is not None and photo.filename:
            photo_path = await save_image_upload(photo, FileTypes.CANDIDATES)
        candidate = service.register_candidate(election_id, current_user, manifesto, photo_path)
    except ValueError as e:
        remove_upload(photo_path)
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(f"Student {current_user.id} registered as candidate in election {election_id}")
    return candidate


@router.patch("/candidates/{candidate_id}", response_model=Candidate)
async def review_candidate(
    candidate_id: int,
    review: CandidateReview,
    current_user: User = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    try:
        candidate = ElectionService(db).review_candidate(candidate_id, review.status)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not candidate:
        raise HTTPException(status_code=404, detail="Candidate not found")
    return candidate


@router.post("/{election_id}/vote", response_model=VoteReceipt)
async def cast_vote(
    election_id: int,
    vote: VoteCreate,
    current_user: User = Depends(get_current_student),
    db: Session = Depends(get_db)
):
    try:
        recorded = ElectionService(db).cast_vote(election_id, current_user, vote.candidate_id)
    except DuplicateVoteError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not recorded:
        raise HTTPException(status_code=404, detail="Election not found")
    return VoteReceipt(election_id=election_id, candidate_id=recorded.candidate_id)


@router.get("/{election_id}/my-vote")
async def get_my_vote_status(
    election_id: int,
    current_user: User = Depends(get_current_student),
    db: Session = Depends(get_db)
):
    service = ElectionService(db)
    _get_election_or_404(service, election_id)
    return {"election_id": election_id, "has_voted": service.has_voted(election_id, current_user.id)}


@router.get("/{election_id}/results", response_model=ElectionResults)
async def get_results(
    election_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = ElectionService(db)
    election = _get_election_or_404(service, election_id)

    if current_user.role != Role.ADMIN:
        if election.status != ElectionStatus.COMPLETED or not election.results_published:
            raise HTTPException(status_code=403, detail="Results are not available yet")

    return service.get_results(election_id)


@router.post("/{election_id}/publish", response_model=Election)
async def publish_results(
    election_id: int,
    current_user: User = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    try:
        election = ElectionService(db).publish_results(election_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not election:
        raise HTTPException(status_code=404, detail="Election not found")
    return election
