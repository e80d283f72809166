"""
Application workflow: submitting, reviewing and withdrawing applications.

Every operation receives an already-authenticated ``Actor`` and a
repository. Business rules live here; the routes only translate HTTP
requests into these calls.

Status changes are permissive: any status may follow any
other, and ``change_status`` does not look at the current status at all.
Only ``withdraw`` checks state, refusing applications that were hired or
rejected.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from jobconnect.exceptions import (
    ConflictError,
    DuplicateRecordError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
)
from jobconnect.models.application import (
    WITHDRAW_BLOCKED_STATUSES,
    Application,
    ApplicationSource,
    ApplicationStatus,
    InterviewDetails,
    OfferDetails,
    Priority,
    Resume,
    StatusHistoryEntry,
)
from jobconnect.models.base import utcnow
from jobconnect.models.job import Job, JobStatus
from jobconnect.models.user import Actor
from jobconnect.repositories.base import ApplicationFilters, Repository
from jobconnect.utils.permissions import can_manage, can_view, is_applicant

logger = logging.getLogger(__name__)

ALREADY_APPLIED = "You have already applied for this job"
DEFAULT_RESUME_FILENAME = "resume.pdf"


def _resume_filename(url: str) -> str:
    name = url.rstrip("/").rsplit("/", 1)[-1]
    return name or DEFAULT_RESUME_FILENAME


def _profile_resume_url(profile: dict) -> Optional[str]:
    # profile is free-form: the resume may be a URL or a {"url": ...} document
    resume = profile.get("resume")
    if isinstance(resume, dict):
        resume = resume.get("url")
    if isinstance(resume, str) and resume.strip():
        return resume.strip()
    return None


class ApplicationWorkflow:

    def __init__(self, repository: Repository, clock: Callable[[], datetime] = utcnow):
        self.repository = repository
        self.clock = clock

    async def _get_job(self, job_id: str) -> Job:
        job = await self.repository.get_job(job_id)
        if job is None:
            raise NotFoundError("Job not found")
        return job

    async def _get_application(self, application_id: str) -> Application:
        application = await self.repository.get_application(application_id)
        if application is None:
            raise NotFoundError("Application not found")
        return application

    async def submit(
        self,
        job_id: str,
        actor: Actor,
        cover_letter: str,
        resume_url: Optional[str] = None,
        source: ApplicationSource = ApplicationSource.DIRECT,
    ) -> Application:
        """
        Create a ``submitted`` application from ``actor`` for the job.

        Checks run in order: job exists, job is active, deadline not passed,
        no earlier application. When ``resume_url`` is omitted the resume
        stored on the applicant's profile is used.
        """
        job = await self._get_job(job_id)

        if job.status != JobStatus.ACTIVE:
            raise InvalidStateError("This job is no longer accepting applications")

        now = self.clock()
        if job.deadline_passed(now):
            raise InvalidStateError("Application deadline has passed")

        if await self.repository.find_application(job.id, actor.id) is not None:
            raise ConflictError(ALREADY_APPLIED)

        if resume_url is None:
            applicant = await self.repository.get_user(actor.id)
            if applicant is not None:
                resume_url = _profile_resume_url(applicant.profile)

        resume = Resume(uploaded_at=now)
        if resume_url:
            resume = Resume(url=resume_url, filename=_resume_filename(resume_url), uploaded_at=now)

        application = Application(
            job_id=job.id,
            applicant_id=actor.id,
            cover_letter=cover_letter,
            resume=resume,
            source=source,
            status=ApplicationStatus.SUBMITTED,
            status_history=[
                StatusHistoryEntry(
                    status=ApplicationStatus.SUBMITTED,
                    changed_at=now,
                    changed_by=actor.id,
                    notes="Application submitted",
                )
            ],
            created_at=now,
            updated_at=now,
        )

        # The pre-check above can race with a concurrent submit; the store's
        # unique (job, applicant) key is what actually decides.
        try:
            application = await self.repository.create_application(application)
        except DuplicateRecordError:
            raise ConflictError(ALREADY_APPLIED) from None

        await self.repository.increment_job_counter(job.id, "applications_count")

        logger.info("Application %s submitted by %s for job %s", application.id, actor.id, job.id)
        return application

    async def change_status(
        self,
        application_id: str,
        actor: Actor,
        new_status: ApplicationStatus,
        notes: Optional[str] = None,
        interview: Optional[InterviewDetails] = None,
        offer: Optional[OfferDetails] = None,
    ) -> Application:
        """Move an application to ``new_status``. Only the job owner or an admin may do this."""
        application = await self._get_application(application_id)
        job = await self._get_job(application.job_id)

        if not can_manage(actor, job):
            raise ForbiddenError("Not authorized to update this application")

        new_status = ApplicationStatus(new_status)
        entry = StatusHistoryEntry(
            status=new_status,
            changed_at=self.clock(),
            changed_by=actor.id,
            notes=notes,
        )

        fields = {"status": new_status.value}
        if notes:
            fields["recruiter_notes"] = notes
        if interview is not None:
            fields["interview"] = interview.model_dump()
        if offer is not None:
            fields["offer"] = offer.model_dump()

        updated = await self.repository.record_status_change(application.id, entry, fields)
        if updated is None:
            raise NotFoundError("Application not found")

        logger.info(
            "Application %s moved from %s to %s by %s",
            application.id, application.status, new_status.value, actor.id,
        )
        return updated

    async def withdraw(self, application_id: str, actor: Actor) -> Application:
        application = await self._get_application(application_id)

        if not is_applicant(actor, application):
            raise ForbiddenError("Not authorized to withdraw this application")

        if ApplicationStatus(application.status) in WITHDRAW_BLOCKED_STATUSES:
            raise InvalidStateError("Cannot withdraw application that has been hired or rejected")

        entry = StatusHistoryEntry(
            status=ApplicationStatus.WITHDRAWN,
            changed_at=self.clock(),
            changed_by=actor.id,
            notes="Application withdrawn by applicant",
        )
        updated = await self.repository.record_status_change(
            application.id,
            entry,
            {"status": ApplicationStatus.WITHDRAWN.value, "is_active": False},
        )
        if updated is None:
            raise NotFoundError("Application not found")

        logger.info("Application %s withdrawn by %s", application.id, actor.id)
        return updated

    async def list_for_applicant(
        self,
        actor: Actor,
        status: Optional[ApplicationStatus] = None,
        skip: int = 0,
        limit: int = 10,
    ) -> Tuple[List[Application], int]:
        filters = ApplicationFilters(
            applicant_id=actor.id,
            status=ApplicationStatus(status).value if status else None,
        )
        return await self.repository.list_applications(filters, skip, limit)

    async def list_for_job(
        self,
        job_id: str,
        actor: Actor,
        status: Optional[ApplicationStatus] = None,
        priority: Optional[Priority] = None,
        skip: int = 0,
        limit: int = 10,
    ) -> Tuple[Job, List[Application], int]:
        job = await self._get_job(job_id)

        if not can_manage(actor, job):
            raise ForbiddenError("Not authorized to view applications for this job")

        filters = ApplicationFilters(
            job_id=job.id,
            status=ApplicationStatus(status).value if status else None,
            priority=Priority(priority).value if priority else None,
        )
        applications, total = await self.repository.list_applications(filters, skip, limit)
        return job, applications, total

    async def get_for_viewer(self, application_id: str, actor: Actor) -> Tuple[Application, Optional[Job]]:
        application = await self._get_application(application_id)
        job = await self.repository.get_job(application.job_id)

        if not can_view(actor, application, job):
            raise ForbiddenError("Not authorized to view this application")

        return application, job
