from enum import Enum


class UserRole(str, Enum):
    Student = "student"
    Admin = "admin"


class ApplicationStatus(str, Enum):
    """
    Well-known status labels. Status columns stay free-form strings,
    so any other label an admin records is accepted as well.
    """
    Submitted = "Submitted"
    UnderReview = "Under Review"
    Approved = "Approved"
    Rejected = "Rejected"


class ActionType(str, Enum):
    InitialSubmission = "Initial Submission"
    StatusChange = "Status Change"
