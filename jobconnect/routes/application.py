from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from jobconnect.database import get_repository
from jobconnect.models.application import ApplicationStatus, Priority
from jobconnect.models.user import Actor, Role, User
from jobconnect.repositories.base import Repository
from jobconnect.schemas.application import (
    ApplicationCreate,
    ApplicationData,
    ApplicationListData,
    ApplicationResponse,
    ApplicationStatusUpdate,
    JobApplicationsData,
    JobSummary,
)
from jobconnect.schemas.common import ApiResponse
from jobconnect.services.application_workflow import ApplicationWorkflow
from jobconnect.utils.auth import get_current_user, require_roles
from jobconnect.utils.pagination import PageParams
from jobconnect.utils.validation import require_valid_id

router = APIRouter(prefix="/applications", tags=["Applications"])

job_seeker_only = require_roles(Role.JOB_SEEKER)
recruiter_or_admin = require_roles(Role.RECRUITER, Role.ADMIN)


def get_workflow(repository: Repository = Depends(get_repository)) -> ApplicationWorkflow:
    return ApplicationWorkflow(repository)


# ===========================
# JOB SEEKER ENDPOINTS
# ===========================

# 1. APPLY FOR JOB
@router.post("/apply/{job_id}", response_model=ApiResponse[ApplicationData], status_code=status.HTTP_201_CREATED)
async def apply_for_job(
    job_id: str,
    payload: ApplicationCreate,
    current_user: User = Depends(job_seeker_only),
    workflow: ApplicationWorkflow = Depends(get_workflow),
):
    require_valid_id(job_id, "job")

    application = await workflow.submit(
        job_id,
        Actor.from_user(current_user),
        cover_letter=payload.cover_letter,
        resume_url=payload.resume_url,
        source=payload.source,
    )
    job = await workflow.repository.get_job(job_id)

    return {
        "success": True,
        "message": "Application submitted successfully",
        "data": {"application": ApplicationResponse.build(application, job=job, applicant=current_user)},
    }


# 2. GET MY APPLICATIONS
@router.get("/my", response_model=ApiResponse[ApplicationListData])
async def get_my_applications(
    paging: PageParams = Depends(),
    application_status: Optional[ApplicationStatus] = Query(None, alias="status"),
    current_user: User = Depends(job_seeker_only),
    workflow: ApplicationWorkflow = Depends(get_workflow),
):
    applications, total = await workflow.list_for_applicant(
        Actor.from_user(current_user), application_status, paging.skip, paging.limit
    )
    jobs = await workflow.repository.get_jobs(a.job_id for a in applications)

    return {
        "success": True,
        "data": {
            "applications": [
                ApplicationResponse.build(a, job=jobs.get(a.job_id)) for a in applications
            ],
            "pagination": paging.describe(total),
        },
    }


# 3. WITHDRAW APPLICATION
@router.put("/withdraw/{application_id}", response_model=ApiResponse[ApplicationData])
async def withdraw_application(
    application_id: str,
    current_user: User = Depends(job_seeker_only),
    workflow: ApplicationWorkflow = Depends(get_workflow),
):
    require_valid_id(application_id, "application")

    application = await workflow.withdraw(application_id, Actor.from_user(current_user))

    return {
        "success": True,
        "message": "Application withdrawn successfully",
        "data": {"application": ApplicationResponse.build(application)},
    }


# ===========================
# RECRUITER ENDPOINTS
# ===========================

# 4. GET APPLICATIONS FOR A JOB
@router.get("/job/{job_id}", response_model=ApiResponse[JobApplicationsData])
async def get_job_applications(
    job_id: str,
    paging: PageParams = Depends(),
    application_status: Optional[ApplicationStatus] = Query(None, alias="status"),
    priority: Optional[Priority] = Query(None),
    current_user: User = Depends(recruiter_or_admin),
    workflow: ApplicationWorkflow = Depends(get_workflow),
):
    require_valid_id(job_id, "job")

    job, applications, total = await workflow.list_for_job(
        job_id,
        Actor.from_user(current_user),
        status=application_status,
        priority=priority,
        skip=paging.skip,
        limit=paging.limit,
    )
    applicants = await workflow.repository.get_users(a.applicant_id for a in applications)

    return {
        "success": True,
        "data": {
            "applications": [
                ApplicationResponse.build(a, applicant=applicants.get(a.applicant_id))
                for a in applications
            ],
            "job": JobSummary.from_job(job),
            "pagination": paging.describe(total),
        },
    }


# 5. UPDATE APPLICATION STATUS
@router.put("/status/{application_id}", response_model=ApiResponse[ApplicationData])
async def update_application_status(
    application_id: str,
    payload: ApplicationStatusUpdate,
    current_user: User = Depends(recruiter_or_admin),
    workflow: ApplicationWorkflow = Depends(get_workflow),
):
    require_valid_id(application_id, "application")

    application = await workflow.change_status(
        application_id,
        Actor.from_user(current_user),
        payload.status,
        notes=payload.notes,
        interview=payload.interview_details,
        offer=payload.offer_details,
    )
    applicant = await workflow.repository.get_user(application.applicant_id)

    return {
        "success": True,
        "message": "Application status updated successfully",
        "data": {"application": ApplicationResponse.build(application, applicant=applicant)},
    }


# ===========================
# SHARED ENDPOINTS
# ===========================

# 6. GET APPLICATION DETAILS (applicant, job owner, or admin)
@router.get("/{application_id}", response_model=ApiResponse[ApplicationData])
async def get_application(
    application_id: str,
    current_user: User = Depends(get_current_user),
    workflow: ApplicationWorkflow = Depends(get_workflow),
):
    require_valid_id(application_id, "application")

    application, job = await workflow.get_for_viewer(application_id, Actor.from_user(current_user))
    applicant = await workflow.repository.get_user(application.applicant_id)

    return {
        "success": True,
        "data": {"application": ApplicationResponse.build(application, job=job, applicant=applicant)},
    }
