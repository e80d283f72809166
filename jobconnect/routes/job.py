from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from jobconnect.database import get_repository
from jobconnect.exceptions import ForbiddenError, InvalidStateError, NotFoundError
from jobconnect.models.job import ExperienceLevel, Job, JobStatus, JobType, WorkMode
from jobconnect.models.user import Actor, Role, User
from jobconnect.repositories.base import ApplicationFilters, JobFilters, Repository
from jobconnect.schemas.common import ApiResponse
from jobconnect.schemas.job import JobCreate, JobData, JobListData, JobResponse, JobUpdate
from jobconnect.utils.auth import require_roles
from jobconnect.utils.pagination import PageParams
from jobconnect.utils.permissions import can_manage
from jobconnect.utils.validation import require_valid_id

router = APIRouter(prefix="/jobs", tags=["Jobs"])

recruiter_or_admin = require_roles(Role.RECRUITER, Role.ADMIN)


async def _get_job_or_404(repository: Repository, job_id: str) -> Job:
    require_valid_id(job_id, "job")
    job = await repository.get_job(job_id)
    if job is None:
        raise NotFoundError("Job not found")
    return job


# ===========================
# PUBLIC ENDPOINTS
# ===========================

# 1. GET ALL JOBS WITH SEARCH AND FILTERS
@router.get("", response_model=ApiResponse[JobListData])
async def get_jobs(
    paging: PageParams = Depends(),
    search: Optional[str] = Query(None, description="Search in title, company, or description"),
    location: Optional[str] = Query(None, description="Filter by location"),
    job_type: Optional[JobType] = Query(None),
    work_mode: Optional[WorkMode] = Query(None),
    experience_level: Optional[ExperienceLevel] = Query(None),
    min_salary: Optional[float] = Query(None, ge=0),
    max_salary: Optional[float] = Query(None, ge=0),
    skills: Optional[str] = Query(None, description="Filter by skills (comma-separated)"),
    job_status: JobStatus = Query(JobStatus.ACTIVE, alias="status"),
    repository: Repository = Depends(get_repository),
):
    """List jobs, newest first. Shows only active jobs by default."""

    filters = JobFilters(
        search=search,
        location=location,
        job_type=job_type.value if job_type else None,
        work_mode=work_mode.value if work_mode else None,
        experience_level=experience_level.value if experience_level else None,
        min_salary=min_salary,
        max_salary=max_salary,
        skills=[s.strip() for s in skills.split(",") if s.strip()] if skills else None,
        status=job_status.value,
    )
    jobs, total = await repository.list_jobs(filters, paging.skip, paging.limit)

    return {
        "success": True,
        "data": {
            "jobs": [JobResponse.from_job(job) for job in jobs],
            "pagination": paging.describe(total),
        },
    }


# ===========================
# RECRUITER ENDPOINTS
# ===========================

# 2. GET MY POSTED JOBS
@router.get("/my/jobs", response_model=ApiResponse[JobListData])
async def get_my_jobs(
    paging: PageParams = Depends(),
    job_status: Optional[JobStatus] = Query(None, alias="status"),
    current_user: User = Depends(recruiter_or_admin),
    repository: Repository = Depends(get_repository),
):
    filters = JobFilters(posted_by=current_user.id, status=job_status.value if job_status else None)
    jobs, total = await repository.list_jobs(filters, paging.skip, paging.limit)

    return {
        "success": True,
        "data": {
            "jobs": [JobResponse.from_job(job) for job in jobs],
            "pagination": paging.describe(total),
        },
    }


# 3. GET SINGLE JOB (Public)
@router.get("/{job_id}", response_model=ApiResponse[JobData])
async def get_job(job_id: str, repository: Repository = Depends(get_repository)):
    """Get a job and count the view."""

    job = await _get_job_or_404(repository, job_id)
    await repository.increment_job_counter(job.id, "views_count")
    job.views_count += 1

    return {"success": True, "data": {"job": JobResponse.from_job(job)}}


# 4. POST A JOB
@router.post("", response_model=ApiResponse[JobData], status_code=status.HTTP_201_CREATED)
async def create_job(
    payload: JobCreate,
    current_user: User = Depends(recruiter_or_admin),
    repository: Repository = Depends(get_repository),
):
    job = Job(posted_by=current_user.id, **payload.model_dump())
    job = await repository.create_job(job)

    return {
        "success": True,
        "message": "Job created successfully",
        "data": {"job": JobResponse.from_job(job)},
    }


# 5. UPDATE JOB (Owner or Admin)
@router.put("/{job_id}", response_model=ApiResponse[JobData])
async def update_job(
    job_id: str,
    payload: JobUpdate,
    current_user: User = Depends(recruiter_or_admin),
    repository: Repository = Depends(get_repository),
):
    job = await _get_job_or_404(repository, job_id)

    if not can_manage(Actor.from_user(current_user), job):
        raise ForbiddenError("Not authorized to update this job")

    changes = payload.changes()
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")

    updated = await repository.update_job(job.id, changes)
    if updated is None:
        raise NotFoundError("Job not found")

    return {
        "success": True,
        "message": "Job updated successfully",
        "data": {"job": JobResponse.from_job(updated)},
    }


# 6. DELETE JOB (Owner or Admin)
@router.delete("/{job_id}", response_model=ApiResponse[None])
async def delete_job(
    job_id: str,
    current_user: User = Depends(recruiter_or_admin),
    repository: Repository = Depends(get_repository),
):
    job = await _get_job_or_404(repository, job_id)

    if not can_manage(Actor.from_user(current_user), job):
        raise ForbiddenError("Not authorized to delete this job")

    # Applications keep pointing at their job, so it has to stay
    if await repository.count_applications(ApplicationFilters(job_id=job.id)):
        raise InvalidStateError("Cannot delete a job that has applications; close it instead")

    await repository.delete_job(job.id)

    return {"success": True, "message": "Job deleted successfully"}
