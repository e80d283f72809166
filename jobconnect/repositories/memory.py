from typing import Any, Dict, Iterable, List, Optional, Tuple

from jobconnect.exceptions import DuplicateRecordError
from jobconnect.models.application import Application, StatusHistoryEntry
from jobconnect.models.base import utcnow
from jobconnect.models.job import Job
from jobconnect.models.user import User

from .base import ApplicationFilters, JobFilters, Repository


def _newest_first(records):
    # reversed() first so that records created in the same instant keep
    # newest-inserted-first order after the stable sort
    return sorted(reversed(list(records)), key=lambda r: r.created_at, reverse=True)


def _contains(haystack: Optional[str], needle: str) -> bool:
    return haystack is not None and needle.lower() in haystack.lower()


def _job_matches(job: Job, filters: JobFilters) -> bool:
    if filters.status and job.status != filters.status:
        return False
    if filters.posted_by and job.posted_by != filters.posted_by:
        return False
    if filters.search and not (
        _contains(job.title, filters.search)
        or _contains(job.company.name, filters.search)
        or _contains(job.description, filters.search)
    ):
        return False
    if filters.location and not _contains(job.location, filters.location):
        return False
    if filters.job_type and job.job_type != filters.job_type:
        return False
    if filters.work_mode and job.work_mode != filters.work_mode:
        return False
    if filters.experience_level and job.experience_level != filters.experience_level:
        return False
    if filters.min_salary is not None and (job.salary.min is None or job.salary.min < filters.min_salary):
        return False
    if filters.max_salary is not None and (job.salary.max is None or job.salary.max > filters.max_salary):
        return False
    if filters.skills and not set(filters.skills) & set(job.skills):
        return False
    return True


def _application_matches(application: Application, filters: ApplicationFilters) -> bool:
    for field, value in filters.model_dump().items():
        if value is not None and getattr(application, field) != value:
            return False
    return True


class InMemoryRepository(Repository):
    """
    Dict-backed repository for demos and tests.

    Records are copied on the way in and out so callers never share state
    with the store. Uniqueness checks and the writes they guard run without
    an ``await`` in between, which is enough on a single event loop; there
    is no protection across processes.
    """

    name = "memory"

    def __init__(self):
        self._users: Dict[str, User] = {}
        self._jobs: Dict[str, Job] = {}
        self._applications: Dict[str, Application] = {}
        self._application_keys: Dict[Tuple[str, str], str] = {}

    # Users

    async def create_user(self, user: User) -> User:
        for existing in self._users.values():
            if existing.email == user.email or existing.username == user.username:
                raise DuplicateRecordError("users", "User with this email or username already exists")
        self._users[user.id] = user.model_copy(deep=True)
        return user

    async def get_user(self, user_id: str) -> Optional[User]:
        user = self._users.get(user_id)
        return user.model_copy(deep=True) if user else None

    async def get_user_by_email(self, email: str) -> Optional[User]:
        for user in self._users.values():
            if user.email == email:
                return user.model_copy(deep=True)
        return None

    async def find_user_by_email_or_username(self, email: str, username: str) -> Optional[User]:
        for user in self._users.values():
            if user.email == email or user.username == username:
                return user.model_copy(deep=True)
        return None

    async def get_users(self, user_ids: Iterable[str]) -> Dict[str, User]:
        return {
            user_id: self._users[user_id].model_copy(deep=True)
            for user_id in set(user_ids)
            if user_id in self._users
        }

    # Jobs

    async def create_job(self, job: Job) -> Job:
        self._jobs[job.id] = job.model_copy(deep=True)
        return job

    async def get_job(self, job_id: str) -> Optional[Job]:
        job = self._jobs.get(job_id)
        return job.model_copy(deep=True) if job else None

    async def get_jobs(self, job_ids: Iterable[str]) -> Dict[str, Job]:
        return {
            job_id: self._jobs[job_id].model_copy(deep=True)
            for job_id in set(job_ids)
            if job_id in self._jobs
        }

    async def list_jobs(self, filters: JobFilters, skip: int, limit: int) -> Tuple[List[Job], int]:
        matches = _newest_first(job for job in self._jobs.values() if _job_matches(job, filters))
        page = [job.model_copy(deep=True) for job in matches[skip:skip + limit]]
        return page, len(matches)

    async def update_job(self, job_id: str, fields: Dict[str, Any]) -> Optional[Job]:
        job = self._jobs.get(job_id)
        if job is None:
            return None
        data = job.model_dump()
        data.update(fields)
        data["updated_at"] = utcnow()
        updated = Job.model_validate(data)
        self._jobs[job_id] = updated
        return updated.model_copy(deep=True)

    async def increment_job_counter(self, job_id: str, field: str, amount: int = 1) -> None:
        job = self._jobs.get(job_id)
        if job is not None:
            setattr(job, field, getattr(job, field) + amount)

    async def delete_job(self, job_id: str) -> bool:
        return self._jobs.pop(job_id, None) is not None

    # Applications

    async def create_application(self, application: Application) -> Application:
        key = (application.job_id, application.applicant_id)
        if key in self._application_keys:
            raise DuplicateRecordError("applications", "Application already exists for this job")
        self._application_keys[key] = application.id
        self._applications[application.id] = application.model_copy(deep=True)
        return application

    async def get_application(self, application_id: str) -> Optional[Application]:
        application = self._applications.get(application_id)
        return application.model_copy(deep=True) if application else None

    async def find_application(self, job_id: str, applicant_id: str) -> Optional[Application]:
        application_id = self._application_keys.get((job_id, applicant_id))
        if application_id is None:
            return None
        return await self.get_application(application_id)

    async def list_applications(
        self, filters: ApplicationFilters, skip: int, limit: int
    ) -> Tuple[List[Application], int]:
        matches = _newest_first(
            a for a in self._applications.values() if _application_matches(a, filters)
        )
        page = [a.model_copy(deep=True) for a in matches[skip:skip + limit]]
        return page, len(matches)

    async def count_applications(self, filters: ApplicationFilters) -> int:
        return sum(1 for a in self._applications.values() if _application_matches(a, filters))

    async def record_status_change(
        self, application_id: str, entry: StatusHistoryEntry, fields: Dict[str, Any]
    ) -> Optional[Application]:
        application = self._applications.get(application_id)
        if application is None:
            return None
        data = application.model_dump()
        data.update(fields)
        data["status_history"].append(entry.model_dump())
        data["updated_at"] = entry.changed_at
        updated = Application.model_validate(data)
        self._applications[application_id] = updated
        return updated.model_copy(deep=True)
