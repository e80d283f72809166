from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from jobconnect.models.application import (
    Application,
    ApplicationSource,
    ApplicationStatus,
    InterviewDetails,
    OfferDetails,
    Resume,
    StatusHistoryEntry,
)
from jobconnect.models.job import Job
from jobconnect.models.user import User
from jobconnect.schemas.common import Pagination


# 1. Input: Apply for a job
class ApplicationCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    cover_letter: str = Field(..., min_length=1, max_length=2000)
    # Falls back to the resume on the applicant's profile
    resume_url: Optional[str] = None
    source: ApplicationSource = ApplicationSource.DIRECT


# 2. Input: Update status
class ApplicationStatusUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    status: ApplicationStatus
    notes: Optional[str] = Field(None, max_length=500)
    interview_details: Optional[InterviewDetails] = None
    offer_details: Optional[OfferDetails] = None


# 3. Output: embedded summaries
class JobSummary(BaseModel):
    id: str
    title: str
    company: str
    location: str
    job_type: str
    work_mode: str
    status: str
    posted_by: str

    @classmethod
    def from_job(cls, job: Job) -> "JobSummary":
        return cls(
            id=job.id,
            title=job.title,
            company=job.company.name,
            location=job.location,
            job_type=job.job_type,
            work_mode=job.work_mode,
            status=job.status,
            posted_by=job.posted_by,
        )


class ApplicantSummary(BaseModel):
    id: str
    username: str
    email: str
    profile: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_user(cls, user: User) -> "ApplicantSummary":
        return cls(id=user.id, username=user.username, email=user.email, profile=user.profile)


# 4. Output: Application
class ApplicationResponse(BaseModel):
    id: str
    job_id: str
    applicant_id: str
    cover_letter: str
    resume: Resume
    status: ApplicationStatus
    status_label: str
    status_history: List[StatusHistoryEntry]
    interview: Optional[InterviewDetails] = None
    offer: Optional[OfferDetails] = None
    recruiter_notes: Optional[str] = None
    priority: str
    source: str
    is_active: bool
    created_at: datetime
    updated_at: datetime
    job: Optional[JobSummary] = None
    applicant: Optional[ApplicantSummary] = None

    @classmethod
    def build(
        cls,
        application: Application,
        job: Optional[Job] = None,
        applicant: Optional[User] = None,
    ) -> "ApplicationResponse":
        return cls(
            **application.model_dump(),
            status_label=application.status_label,
            job=JobSummary.from_job(job) if job else None,
            applicant=ApplicantSummary.from_user(applicant) if applicant else None,
        )


class ApplicationData(BaseModel):
    application: ApplicationResponse


class ApplicationListData(BaseModel):
    applications: List[ApplicationResponse]
    pagination: Pagination


class JobApplicationsData(ApplicationListData):
    job: JobSummary
