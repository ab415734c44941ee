from .base import BaseModel
from .user import User
from .election import Election, Candidate, Vote, ElectionStatus, CandidateStatus
from .complaint import Complaint, ComplaintStatus
from .application import Application, ApplicationType, ApplicationStatus
from .cheating_record import CheatingRecord

__all__ = [
    "BaseModel",
    "User",
    "Election",
    "Candidate",
    "Vote",
    "ElectionStatus",
    "CandidateStatus",
    "Complaint",
    "ComplaintStatus",
    "Application",
    "ApplicationType",
    "ApplicationStatus",
    "CheatingRecord",
]
