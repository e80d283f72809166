from enum import Enum
from typing import List, Optional

from pydantic import Field

from .base import Document, DomainModel, UTCDateTime, utcnow
from .job import Currency, SalaryPeriod


class ApplicationStatus(str, Enum):
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    SHORTLISTED = "shortlisted"
    INTERVIEW_SCHEDULED = "interview_scheduled"
    INTERVIEW_COMPLETED = "interview_completed"
    OFFER_EXTENDED = "offer_extended"
    HIRED = "hired"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


STATUS_LABELS = {
    ApplicationStatus.SUBMITTED: "Application Submitted",
    ApplicationStatus.UNDER_REVIEW: "Under Review",
    ApplicationStatus.SHORTLISTED: "Shortlisted",
    ApplicationStatus.INTERVIEW_SCHEDULED: "Interview Scheduled",
    ApplicationStatus.INTERVIEW_COMPLETED: "Interview Completed",
    ApplicationStatus.OFFER_EXTENDED: "Offer Extended",
    ApplicationStatus.HIRED: "Hired",
    ApplicationStatus.REJECTED: "Rejected",
    ApplicationStatus.WITHDRAWN: "Withdrawn",
}

# An applicant may withdraw from anything except a final decision,
# including an application that is already withdrawn.
WITHDRAW_BLOCKED_STATUSES = frozenset({
    ApplicationStatus.HIRED,
    ApplicationStatus.REJECTED,
})


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ApplicationSource(str, Enum):
    DIRECT = "direct"
    REFERRAL = "referral"
    JOB_BOARD = "job_board"
    SOCIAL_MEDIA = "social_media"
    COMPANY_WEBSITE = "company_website"


class InterviewType(str, Enum):
    PHONE = "phone"
    VIDEO = "video"
    IN_PERSON = "in-person"
    TECHNICAL = "technical"
    PANEL = "panel"


class StatusHistoryEntry(Document):
    status: ApplicationStatus
    changed_at: UTCDateTime = Field(default_factory=utcnow)
    changed_by: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=500)


class Resume(Document):
    url: Optional[str] = None
    filename: Optional[str] = None
    uploaded_at: UTCDateTime = Field(default_factory=utcnow)


class InterviewDetails(Document):
    scheduled_at: Optional[UTCDateTime] = None
    type: Optional[InterviewType] = None
    location: Optional[str] = None
    meeting_link: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=1000)
    feedback: Optional[str] = Field(None, max_length=2000)
    rating: Optional[int] = Field(None, ge=1, le=5)


class OfferSalary(Document):
    amount: Optional[float] = Field(None, ge=0)
    currency: Currency = Currency.USD
    period: SalaryPeriod = SalaryPeriod.YEARLY


class OfferDetails(Document):
    salary: Optional[OfferSalary] = None
    start_date: Optional[UTCDateTime] = None
    benefits: List[str] = Field(default_factory=list)
    terms: Optional[str] = Field(None, max_length=1000)
    expires_at: Optional[UTCDateTime] = None


class Application(DomainModel):
    job_id: str
    applicant_id: str
    cover_letter: str
    resume: Resume = Field(default_factory=Resume)
    status: ApplicationStatus = ApplicationStatus.SUBMITTED
    status_history: List[StatusHistoryEntry] = Field(default_factory=list)
    interview: Optional[InterviewDetails] = None
    offer: Optional[OfferDetails] = None
    recruiter_notes: Optional[str] = Field(None, max_length=1000)
    priority: Priority = Priority.MEDIUM
    source: ApplicationSource = ApplicationSource.DIRECT
    is_active: bool = True
    created_at: UTCDateTime = Field(default_factory=utcnow)
    updated_at: UTCDateTime = Field(default_factory=utcnow)

    @property
    def status_label(self) -> str:
        return STATUS_LABELS[ApplicationStatus(self.status)]
