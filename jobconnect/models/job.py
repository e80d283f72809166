from enum import Enum
from typing import List, Optional

from pydantic import Field, model_validator

from .base import Document, DomainModel, UTCDateTime, utcnow


class JobStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    CLOSED = "closed"
    DRAFT = "draft"


class JobType(str, Enum):
    FULL_TIME = "full-time"
    PART_TIME = "part-time"
    CONTRACT = "contract"
    INTERNSHIP = "internship"
    FREELANCE = "freelance"


class WorkMode(str, Enum):
    REMOTE = "remote"
    ON_SITE = "on-site"
    HYBRID = "hybrid"


class ExperienceLevel(str, Enum):
    ENTRY = "entry"
    MID = "mid"
    SENIOR = "senior"
    LEAD = "lead"
    EXECUTIVE = "executive"


class Currency(str, Enum):
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    CAD = "CAD"
    AUD = "AUD"
    INR = "INR"


class SalaryPeriod(str, Enum):
    HOURLY = "hourly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Company(Document):
    name: str = Field(..., min_length=1, max_length=100)
    logo: Optional[str] = None
    website: Optional[str] = None


class Salary(Document):
    min: Optional[float] = Field(None, ge=0)
    max: Optional[float] = Field(None, ge=0)
    currency: Currency = Currency.USD
    period: SalaryPeriod = SalaryPeriod.YEARLY

    @model_validator(mode="after")
    def check_range(self):
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError("Minimum salary cannot be greater than maximum salary")
        return self

    @property
    def display(self) -> str:
        if self.min is not None and self.max is not None:
            return f"{self.currency} {self.min:,.0f} - {self.max:,.0f} {self.period}"
        if self.min is not None:
            return f"{self.currency} {self.min:,.0f}+ {self.period}"
        if self.max is not None:
            return f"Up to {self.currency} {self.max:,.0f} {self.period}"
        return "Salary not specified"


class Job(DomainModel):
    posted_by: str
    title: str
    company: Company
    description: str
    requirements: str
    location: str
    job_type: JobType = JobType.FULL_TIME
    work_mode: WorkMode = WorkMode.ON_SITE
    experience_level: ExperienceLevel = ExperienceLevel.MID
    salary: Salary = Field(default_factory=Salary)
    skills: List[str] = Field(default_factory=list)
    benefits: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    application_deadline: Optional[UTCDateTime] = None
    status: JobStatus = JobStatus.ACTIVE
    applications_count: int = Field(0, ge=0)
    views_count: int = Field(0, ge=0)
    featured: bool = False
    created_at: UTCDateTime = Field(default_factory=utcnow)
    updated_at: UTCDateTime = Field(default_factory=utcnow)

    def deadline_passed(self, now) -> bool:
        return self.application_deadline is not None and now > self.application_deadline
