from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import datetime
from typing import Optional, List

from ..utils.timezone import to_naive_utc


class ElectionBase(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    position: str = Field(..., min_length=1)
    start_time: datetime
    end_time: datetime


class ElectionCreate(ElectionBase):

    @field_validator("start_time", "end_time")
    @classmethod
    def as_naive_utc(cls, value: datetime) -> datetime:
        return to_naive_utc(value)

    @model_validator(mode="after")
    def check_window(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class ElectionUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    position: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def as_naive_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value) if value is not None else None


class Election(ElectionBase):
    id: int
    status: str
    results_published: bool
    created_at: datetime

    class Config:
        from_attributes = True


class Candidate(BaseModel):
    id: int
    election_id: int
    student_id: int
    name: Optional[str] = None
    registration_number: Optional[str] = None
    manifesto: Optional[str] = None
    photo: Optional[str] = None
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


class CandidateReview(BaseModel):
    status: str = Field(..., pattern="^(approved|rejected)$")


class VoteCreate(BaseModel):
    candidate_id: int


class VoteReceipt(BaseModel):
    success: bool = True
    message: str = "Vote recorded"
    election_id: int
    candidate_id: int


class CandidateTally(BaseModel):
    candidate_id: int
    name: Optional[str] = None
    votes: int


class ElectionResults(BaseModel):
    election_id: int
    title: str
    status: str
    results_published: bool
    total_votes: int
    tally: List[CandidateTally] = []
    leaders: List[int] = []
