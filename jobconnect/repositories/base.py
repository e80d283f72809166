"""
Storage interface shared by the MongoDB adapter and the in-memory store.

The concrete repository is chosen once at startup (see
``jobconnect.database.init_repository``) and handed to request handlers
through the ``get_repository`` dependency.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel

from jobconnect.models.application import Application, StatusHistoryEntry
from jobconnect.models.job import Job
from jobconnect.models.user import User


class JobFilters(BaseModel):
    search: Optional[str] = None
    location: Optional[str] = None
    job_type: Optional[str] = None
    work_mode: Optional[str] = None
    experience_level: Optional[str] = None
    min_salary: Optional[float] = None
    max_salary: Optional[float] = None
    skills: Optional[List[str]] = None
    status: Optional[str] = None
    posted_by: Optional[str] = None


class ApplicationFilters(BaseModel):
    job_id: Optional[str] = None
    applicant_id: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None


class Repository(ABC):
    name = "base"

    async def ensure_indexes(self) -> None:
        """Create whatever constraints the backend needs. No-op by default."""

    async def close(self) -> None:
        """Release connections. No-op by default."""

    # Users

    @abstractmethod
    async def create_user(self, user: User) -> User:
        """Insert a user; raises DuplicateRecordError on a taken email or username."""

    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[User]:
        ...

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    async def find_user_by_email_or_username(self, email: str, username: str) -> Optional[User]:
        ...

    @abstractmethod
    async def get_users(self, user_ids: Iterable[str]) -> Dict[str, User]:
        ...

    # Jobs

    @abstractmethod
    async def create_job(self, job: Job) -> Job:
        ...

    @abstractmethod
    async def get_job(self, job_id: str) -> Optional[Job]:
        ...

    @abstractmethod
    async def get_jobs(self, job_ids: Iterable[str]) -> Dict[str, Job]:
        ...

    @abstractmethod
    async def list_jobs(self, filters: JobFilters, skip: int, limit: int) -> Tuple[List[Job], int]:
        """Return one page of matching jobs, newest first, and the total match count."""

    @abstractmethod
    async def update_job(self, job_id: str, fields: Dict[str, Any]) -> Optional[Job]:
        ...

    @abstractmethod
    async def increment_job_counter(self, job_id: str, field: str, amount: int = 1) -> None:
        ...

    @abstractmethod
    async def delete_job(self, job_id: str) -> bool:
        ...

    # Applications

    @abstractmethod
    async def create_application(self, application: Application) -> Application:
        """Insert an application; raises DuplicateRecordError if (job, applicant) exists."""

    @abstractmethod
    async def get_application(self, application_id: str) -> Optional[Application]:
        ...

    @abstractmethod
    async def find_application(self, job_id: str, applicant_id: str) -> Optional[Application]:
        ...

    @abstractmethod
    async def list_applications(
        self, filters: ApplicationFilters, skip: int, limit: int
    ) -> Tuple[List[Application], int]:
        ...

    @abstractmethod
    async def count_applications(self, filters: ApplicationFilters) -> int:
        ...

    @abstractmethod
    async def record_status_change(
        self, application_id: str, entry: StatusHistoryEntry, fields: Dict[str, Any]
    ) -> Optional[Application]:
        """Apply ``fields`` and append ``entry`` to the history in one write."""
