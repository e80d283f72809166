"""
Ownership checks for jobs and applications.

All of these are pure predicates over an ``Actor`` and already-loaded
records. The workflow calls them before every read or write it guards.
"""

from typing import Optional

from jobconnect.models.application import Application
from jobconnect.models.job import Job
from jobconnect.models.user import Actor, Role


def is_admin(actor: Actor) -> bool:
    return actor.role == Role.ADMIN


def can_manage(actor: Actor, job: Job) -> bool:
    """The job's poster and admins may change the job and its applications."""
    return actor.id == job.posted_by or is_admin(actor)


def can_view(actor: Actor, application: Application, job: Optional[Job] = None) -> bool:
    """
    The applicant, the poster of the job applied to, and admins may read an
    application. ``job`` may be None if it could not be loaded, in which case
    only the applicant and admins pass.
    """
    if actor.id == application.applicant_id or is_admin(actor):
        return True
    return job is not None and actor.id == job.posted_by


def is_applicant(actor: Actor, application: Application) -> bool:
    return actor.id == application.applicant_id
