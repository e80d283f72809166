from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

from jobconnect.models.job import (
    Company,
    ExperienceLevel,
    Job,
    JobStatus,
    JobType,
    Salary,
    WorkMode,
)
from jobconnect.schemas.common import Pagination

Skill = Annotated[str, StringConstraints(strip_whitespace=True, max_length=50)]
Benefit = Annotated[str, StringConstraints(strip_whitespace=True, max_length=100)]
Tag = Annotated[str, StringConstraints(strip_whitespace=True, max_length=30)]


def _company_from_name(value):
    # A bare string is shorthand for {"name": ...}
    if isinstance(value, str):
        return {"name": value}
    return value


# 1. Input: What the Recruiter sends
class JobCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, use_enum_values=True)

    title: str = Field(..., min_length=1, max_length=100)
    company: Company
    description: str = Field(..., min_length=1, max_length=5000)
    requirements: str = Field(..., min_length=1, max_length=3000)
    location: str = Field(..., min_length=1, max_length=100)
    job_type: JobType = JobType.FULL_TIME
    work_mode: WorkMode = WorkMode.ON_SITE
    experience_level: ExperienceLevel = ExperienceLevel.MID
    salary: Salary = Field(default_factory=Salary)
    skills: List[Skill] = Field(default_factory=list)
    benefits: List[Benefit] = Field(default_factory=list)
    tags: List[Tag] = Field(default_factory=list)
    application_deadline: Optional[datetime] = None
    status: JobStatus = JobStatus.ACTIVE
    featured: bool = False

    @field_validator("company", mode="before")
    @classmethod
    def normalize_company(cls, value):
        return _company_from_name(value)


# 2. Input: Update existing job
class JobUpdate(BaseModel):
    """Partial update; only the fields sent are changed."""
    model_config = ConfigDict(str_strip_whitespace=True, use_enum_values=True)

    title: Optional[str] = Field(None, min_length=1, max_length=100)
    company: Optional[Company] = None
    description: Optional[str] = Field(None, min_length=1, max_length=5000)
    requirements: Optional[str] = Field(None, min_length=1, max_length=3000)
    location: Optional[str] = Field(None, min_length=1, max_length=100)
    job_type: Optional[JobType] = None
    work_mode: Optional[WorkMode] = None
    experience_level: Optional[ExperienceLevel] = None
    salary: Optional[Salary] = None
    skills: Optional[List[Skill]] = None
    benefits: Optional[List[Benefit]] = None
    tags: Optional[List[Tag]] = None
    application_deadline: Optional[datetime] = None
    status: Optional[JobStatus] = None
    featured: Optional[bool] = None

    @field_validator("company", mode="before")
    @classmethod
    def normalize_company(cls, value):
        return _company_from_name(value)

    def changes(self) -> dict:
        # application_deadline is the only field that may be cleared with null
        return {
            field: value
            for field, value in self.model_dump(exclude_unset=True).items()
            if value is not None or field == "application_deadline"
        }


# 3. Output
class JobResponse(Job):
    salary_range: str = "Salary not specified"

    @classmethod
    def from_job(cls, job: Job) -> "JobResponse":
        return cls(**job.model_dump(), salary_range=job.salary.display)


class JobData(BaseModel):
    job: JobResponse


class JobListData(BaseModel):
    jobs: List[JobResponse]
    pagination: Pagination
