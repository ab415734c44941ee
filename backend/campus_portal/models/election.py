from datetime import datetime
from typing import Optional

from sqlalchemy import Column, String, Text, DateTime, Boolean, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import BaseModel


class ElectionStatus:
    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"


class CandidateStatus:
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    ALL = (PENDING, APPROVED, REJECTED)


class Election(BaseModel):
    __tablename__ = "elections"

    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    position = Column(String, nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    results_published = Column(Boolean, default=False, nullable=False)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    created_by = relationship("User")
    candidates = relationship("Candidate", back_populates="election", cascade="all, delete-orphan")
    votes = relationship("Vote", back_populates="election", cascade="all, delete-orphan")

    def status_at(self, now: Optional[datetime] = None) -> str:
        now = now or datetime.utcnow()
        if now < self.start_time:
            return ElectionStatus.UPCOMING
        if now > self.end_time:
            return ElectionStatus.COMPLETED
        return ElectionStatus.ACTIVE

    @property
    def status(self) -> str:
        return self.status_at()


class Candidate(BaseModel):
    __tablename__ = "candidates"
    __table_args__ = (
        UniqueConstraint("election_id", "student_id", name="uq_candidate_election_student"),
    )

    election_id = Column(Integer, ForeignKey("elections.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    manifesto = Column(Text, nullable=True)
    photo = Column(String, nullable=True)
    status = Column(String, default=CandidateStatus.PENDING, nullable=False)

    election = relationship("Election", back_populates="candidates")
    student = relationship("User")
    votes = relationship("Vote", back_populates="candidate", cascade="all, delete-orphan")

    @property
    def name(self) -> Optional[str]:
        return self.student.full_name if self.student else None

    @property
    def registration_number(self) -> Optional[str]:
        return self.student.registration_number if self.student else None


class Vote(BaseModel):
    __tablename__ = "votes"
    __table_args__ = (
        UniqueConstraint("election_id", "voter_id", name="uq_vote_election_voter"),
    )

    election_id = Column(Integer, ForeignKey("elections.id", ondelete="CASCADE"), nullable=False, index=True)
    candidate_id = Column(Integer, ForeignKey("candidates.id", ondelete="CASCADE"), nullable=False, index=True)
    voter_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    election = relationship("Election", back_populates="votes")
    candidate = relationship("Candidate", back_populates="votes")
    voter = relationship("User")
