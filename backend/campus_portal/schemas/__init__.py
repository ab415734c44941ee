from .auth import LoginRequest, AuthResponse, CheckAuthResponse, MessageResponse
from .user import User, StudentCreate, TeacherCreate, StaffCreate, UserUpdate, AccountVerification
from .election import (
    Election, ElectionCreate, ElectionUpdate, Candidate, CandidateReview,
    VoteCreate, VoteReceipt, ElectionResults, CandidateTally
)
from .complaint import Complaint, ComplaintUpdate
from .application import Application, ApplicationReview
from .cheating_record import CheatingRecord

__all__ = [
    "LoginRequest",
    "AuthResponse",
    "CheckAuthResponse",
    "MessageResponse",
    "User",
    "StudentCreate",
    "TeacherCreate",
    "StaffCreate",
    "UserUpdate",
    "AccountVerification",
    "Election",
    "ElectionCreate",
    "ElectionUpdate",
    "Candidate",
    "CandidateReview",
    "VoteCreate",
    "VoteReceipt",
    "ElectionResults",
    "CandidateTally",
    "Complaint",
    "ComplaintUpdate",
    "Application",
    "ApplicationReview",
    "CheatingRecord",
]
