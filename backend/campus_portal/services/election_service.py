import logging
from datetime import datetime
from typing import Optional, List, Dict, Any

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from ..models.election import Election, Candidate, Vote, ElectionStatus, CandidateStatus
from ..models.user import User
from ..schemas.election import ElectionCreate, ElectionUpdate
from ..utils.timezone import to_naive_utc

logger = logging.getLogger(__name__)


class DuplicateVoteError(ValueError):
    pass


class ElectionService:
    def __init__(self, db: Session):
        self.db = db

    def list_elections(self, status: Optional[str] = None) -> List[Election]:
        elections = self.db.query(Election).order_by(Election.start_time.desc()).all()
        if status:
            now = datetime.utcnow()
            elections = [e for e in elections if e.status_at(now) == status]
        return elections

    def get_election(self, election_id: int) -> Optional[Election]:
        return self.db.query(Election).filter(Election.id == election_id).first()

    def create_election(self, data: ElectionCreate, created_by: User) -> Election:
        election = Election(
            title=data.title,
            description=data.description,
            position=data.position,
            start_time=to_naive_utc(data.start_time),
            end_time=to_naive_utc(data.end_time),
            created_by_id=created_by.id,
        )
        self.db.add(election)
        self.db.commit()
        self.db.refresh(election)
        logger.info(f"Election {election.id} '{election.title}' created by user {created_by.id}")
        return election

    def update_election(self, election_id: int, data: ElectionUpdate) -> Optional[Election]:
        election = self.get_election(election_id)
        if not election:
            return None

        update_data = data.model_dump(exclude_unset=True)
        for field in ("start_time", "end_time"):
            if update_data.get(field) is not None:
                update_data[field] = to_naive_utc(update_data[field])

        if update_data.get("start_time") is not None and election.votes:
            raise ValueError("Cannot move the start of an election that already has votes")

        start = update_data.get("start_time") or election.start_time
        end = update_data.get("end_time") or election.end_time
        if end <= start:
            raise ValueError("end_time must be after start_time")

        for field, value in update_data.items():
            if value is not None:
                setattr(election, field, value)

        self.db.commit()
        self.db.refresh(election)
        return election

    def delete_election(self, election_id: int) -> bool:
        election = self.get_election(election_id)
        if not election:
            return False
        self.db.delete(election)
        self.db.commit()
        logger.info(f"Election {election_id} deleted")
        return True

    def list_candidates(self, election_id: int, status: Optional[str] = None) -> List[Candidate]:
        query = (
            self.db.query(Candidate)
            .options(joinedload(Candidate.student))
            .filter(Candidate.election_id == election_id)
        )
        if status:
            query = query.filter(Candidate.status == status)
        return query.order_by(Candidate.created_at).all()

    def get_candidate(self, candidate_id: int) -> Optional[Candidate]:
        return self.db.query(Candidate).filter(Candidate.id == candidate_id).first()

    def register_candidate(self, election_id: int, student: User, manifesto: Optional[str],
                           photo: Optional[str] = None) -> Optional[Candidate]:
        election = self.get_election(election_id)
        if not election:
            return None
        if not student.is_verified:
            raise ValueError("Only verified students can stand as candidates")
        if election.status != ElectionStatus.UPCOMING:
            raise ValueError("Candidate registration is closed for this election")

        existing = self.db.query(Candidate).filter(
            Candidate.election_id == election_id,
            Candidate.student_id == student.id
        ).first()
        if existing:
            raise ValueError("Already registered as a candidate for this election")

        candidate = Candidate(
            election_id=election_id,
            student_id=student.id,
            manifesto=manifesto,
            photo=photo,
            status=CandidateStatus.PENDING,
        )
        self.db.add(candidate)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ValueError("Already registered as a candidate for this election") from e
        self.db.refresh(candidate)
        return candidate

    def review_candidate(self, candidate_id: int, status: str) -> Optional[Candidate]:
        if status not in (CandidateStatus.APPROVED, CandidateStatus.REJECTED):
            raise ValueError(f"Invalid candidate status: {status}")
        candidate = self.get_candidate(candidate_id)
        if not candidate:
            return None
        if candidate.election.status == ElectionStatus.COMPLETED:
            raise ValueError("Election has already finished")
        candidate.status = status
        self.db.commit()
        self.db.refresh(candidate)
        return candidate

    def has_voted(self, election_id: int, voter_id: int) -> bool:
        return self.db.query(Vote.id).filter(
            Vote.election_id == election_id,
            Vote.voter_id == voter_id
        ).first() is not None

    def cast_vote(self, election_id: int, voter: User, candidate_id: int) -> Optional[Vote]:
        election = self.get_election(election_id)
        if not election:
            return None
        if not voter.is_verified:
            raise ValueError("Only verified students can vote")
        if election.status != ElectionStatus.ACTIVE:
            raise ValueError("Voting is not currently open for this election")

        candidate = self.get_candidate(candidate_id)
        if (not candidate or candidate.election_id != election_id
                or candidate.status != CandidateStatus.APPROVED):
            raise ValueError("Candidate is not standing in this election")

        if self.has_voted(election_id, voter.id):
            raise DuplicateVoteError("You have already voted in this election")

        vote = Vote(election_id=election_id, candidate_id=candidate_id, voter_id=voter.id)
        self.db.add(vote)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateVoteError("You have already voted in this election") from e
        self.db.refresh(vote)
        logger.info(f"Vote recorded in election {election_id}")
        return vote

    def get_results(self, election_id: int) -> Optional[Dict[str, Any]]:
        election = self.get_election(election_id)
        if not election:
            return None

        counts = dict(
            self.db.query(Vote.candidate_id, func.count(Vote.id))
            .filter(Vote.election_id == election_id)
            .group_by(Vote.candidate_id)
            .all()
        )
        candidates = self.list_candidates(election_id, status=CandidateStatus.APPROVED)
        tally = sorted(
            (
                {"candidate_id": c.id, "name": c.name, "votes": counts.get(c.id, 0)}
                for c in candidates
            ),
            key=lambda row: (-row["votes"], row["candidate_id"])
        )

        top = tally[0]["votes"] if tally else 0
        leaders = [row["candidate_id"] for row in tally if top > 0 and row["votes"] == top]

        return {
            "election_id": election.id,
            "title": election.title,
            "status": election.status,
            "results_published": election.results_published,
            "total_votes": sum(counts.values()),
            "tally": tally,
            "leaders": leaders,
        }

    def publish_results(self, election_id: int) -> Optional[Election]:
        election = self.get_election(election_id)
        if not election:
            return None
        if election.status != ElectionStatus.COMPLETED:
            raise ValueError("Results can only be published after the election ends")
        election.results_published = True
        self.db.commit()
        self.db.refresh(election)
        return election

    def finished_unpublished(self) -> List[Election]:
        now = datetime.utcnow()
        return (
            self.db.query(Election)
            .filter(Election.end_time < now, Election.results_published.is_(False))
            .all()
        )
