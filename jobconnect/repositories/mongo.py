import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from jobconnect.exceptions import DuplicateRecordError
from jobconnect.models.application import Application, StatusHistoryEntry
from jobconnect.models.base import is_valid_id, utcnow
from jobconnect.models.job import Job
from jobconnect.models.user import User

from .base import ApplicationFilters, JobFilters, Repository


def _to_document(model) -> Dict[str, Any]:
    doc = model.model_dump()
    doc["_id"] = ObjectId(doc.pop("id"))
    return doc


def _from_document(model_cls, doc):
    if doc is None:
        return None
    doc = dict(doc)
    doc["id"] = str(doc.pop("_id"))
    return model_cls.model_validate(doc)


def _object_ids(ids: Iterable[str]) -> List[ObjectId]:
    return [ObjectId(i) for i in set(ids) if is_valid_id(i)]


def _job_query(filters: JobFilters) -> Dict[str, Any]:
    query: Dict[str, Any] = {}

    if filters.status:
        query["status"] = filters.status
    if filters.posted_by:
        query["posted_by"] = filters.posted_by

    if filters.search:
        pattern = re.escape(filters.search)
        query["$or"] = [
            {"title": {"$regex": pattern, "$options": "i"}},
            {"company.name": {"$regex": pattern, "$options": "i"}},
            {"description": {"$regex": pattern, "$options": "i"}},
        ]

    if filters.location:
        query["location"] = {"$regex": re.escape(filters.location), "$options": "i"}

    for field in ("job_type", "work_mode", "experience_level"):
        value = getattr(filters, field)
        if value:
            query[field] = value

    if filters.min_salary is not None:
        query["salary.min"] = {"$gte": filters.min_salary}
    if filters.max_salary is not None:
        query["salary.max"] = {"$lte": filters.max_salary}

    if filters.skills:
        query["skills"] = {"$in": filters.skills}

    return query


def _application_query(filters: ApplicationFilters) -> Dict[str, Any]:
    return {
        field: value
        for field, value in filters.model_dump().items()
        if value is not None
    }


class MongoRepository(Repository):
    """Repository backed by a Motor database handle."""

    name = "mongo"

    def __init__(self, db, client=None):
        self.db = db
        self.client = client

    async def ensure_indexes(self) -> None:
        await self.db.users.create_index("email", unique=True)
        await self.db.users.create_index("username", unique=True)

        await self.db.jobs.create_index("posted_by")
        await self.db.jobs.create_index("status")
        await self.db.jobs.create_index("location")
        await self.db.jobs.create_index([("created_at", DESCENDING)])

        # One application per (job, applicant): concurrent submits race on this index
        await self.db.applications.create_index(
            [("job_id", ASCENDING), ("applicant_id", ASCENDING)], unique=True
        )
        await self.db.applications.create_index("status")
        await self.db.applications.create_index([("applicant_id", ASCENDING), ("created_at", DESCENDING)])
        await self.db.applications.create_index([("job_id", ASCENDING), ("status", ASCENDING)])

    async def close(self) -> None:
        if self.client is not None:
            self.client.close()

    # Users

    async def create_user(self, user: User) -> User:
        try:
            await self.db.users.insert_one(_to_document(user))
        except DuplicateKeyError:
            raise DuplicateRecordError("users", "User with this email or username already exists")
        return user

    async def get_user(self, user_id: str) -> Optional[User]:
        if not is_valid_id(user_id):
            return None
        return _from_document(User, await self.db.users.find_one({"_id": ObjectId(user_id)}))

    async def get_user_by_email(self, email: str) -> Optional[User]:
        return _from_document(User, await self.db.users.find_one({"email": email}))

    async def find_user_by_email_or_username(self, email: str, username: str) -> Optional[User]:
        doc = await self.db.users.find_one({"$or": [{"email": email}, {"username": username}]})
        return _from_document(User, doc)

    async def get_users(self, user_ids: Iterable[str]) -> Dict[str, User]:
        cursor = self.db.users.find({"_id": {"$in": _object_ids(user_ids)}})
        users = [_from_document(User, doc) async for doc in cursor]
        return {user.id: user for user in users}

    # Jobs

    async def create_job(self, job: Job) -> Job:
        await self.db.jobs.insert_one(_to_document(job))
        return job

    async def get_job(self, job_id: str) -> Optional[Job]:
        if not is_valid_id(job_id):
            return None
        return _from_document(Job, await self.db.jobs.find_one({"_id": ObjectId(job_id)}))

    async def get_jobs(self, job_ids: Iterable[str]) -> Dict[str, Job]:
        cursor = self.db.jobs.find({"_id": {"$in": _object_ids(job_ids)}})
        jobs = [_from_document(Job, doc) async for doc in cursor]
        return {job.id: job for job in jobs}

    async def list_jobs(self, filters: JobFilters, skip: int, limit: int) -> Tuple[List[Job], int]:
        query = _job_query(filters)
        cursor = self.db.jobs.find(query).sort("created_at", DESCENDING).skip(skip).limit(limit)
        jobs = [_from_document(Job, doc) for doc in await cursor.to_list(length=limit)]
        total = await self.db.jobs.count_documents(query)
        return jobs, total

    async def update_job(self, job_id: str, fields: Dict[str, Any]) -> Optional[Job]:
        if not is_valid_id(job_id):
            return None
        doc = await self.db.jobs.find_one_and_update(
            {"_id": ObjectId(job_id)},
            {"$set": {**fields, "updated_at": utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        return _from_document(Job, doc)

    async def increment_job_counter(self, job_id: str, field: str, amount: int = 1) -> None:
        await self.db.jobs.update_one({"_id": ObjectId(job_id)}, {"$inc": {field: amount}})

    async def delete_job(self, job_id: str) -> bool:
        if not is_valid_id(job_id):
            return False
        result = await self.db.jobs.delete_one({"_id": ObjectId(job_id)})
        return result.deleted_count == 1

    # Applications

    async def create_application(self, application: Application) -> Application:
        try:
            await self.db.applications.insert_one(_to_document(application))
        except DuplicateKeyError:
            raise DuplicateRecordError("applications", "Application already exists for this job")
        return application

    async def get_application(self, application_id: str) -> Optional[Application]:
        if not is_valid_id(application_id):
            return None
        doc = await self.db.applications.find_one({"_id": ObjectId(application_id)})
        return _from_document(Application, doc)

    async def find_application(self, job_id: str, applicant_id: str) -> Optional[Application]:
        doc = await self.db.applications.find_one({"job_id": job_id, "applicant_id": applicant_id})
        return _from_document(Application, doc)

    async def list_applications(
        self, filters: ApplicationFilters, skip: int, limit: int
    ) -> Tuple[List[Application], int]:
        query = _application_query(filters)
        cursor = self.db.applications.find(query).sort("created_at", DESCENDING).skip(skip).limit(limit)
        applications = [_from_document(Application, doc) for doc in await cursor.to_list(length=limit)]
        total = await self.db.applications.count_documents(query)
        return applications, total

    async def count_applications(self, filters: ApplicationFilters) -> int:
        return await self.db.applications.count_documents(_application_query(filters))

    async def record_status_change(
        self, application_id: str, entry: StatusHistoryEntry, fields: Dict[str, Any]
    ) -> Optional[Application]:
        if not is_valid_id(application_id):
            return None
        doc = await self.db.applications.find_one_and_update(
            {"_id": ObjectId(application_id)},
            {
                "$set": {**fields, "updated_at": entry.changed_at},
                "$push": {"status_history": entry.model_dump()},
            },
            return_document=ReturnDocument.AFTER,
        )
        return _from_document(Application, doc)
