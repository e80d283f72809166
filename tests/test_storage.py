import pytest
from pymongo.errors import ServerSelectionTimeoutError

from jobconnect import database
from jobconnect.exceptions import DuplicateRecordError
from jobconnect.models.application import Application, ApplicationStatus, StatusHistoryEntry
from jobconnect.models.job import Company, Job
from jobconnect.repositories.base import ApplicationFilters, JobFilters
from jobconnect.repositories.memory import InMemoryRepository
from jobconnect.repositories.mongo import _job_query


def _job(**overrides):
    fields = {
        "posted_by": "a" * 24,
        "title": "SRE",
        "company": Company(name="Initech"),
        "description": "Pager duty",
        "requirements": "Bash",
        "location": "Remote",
    }
    return Job(**{**fields, **overrides})


class TestInitRepository:
    @pytest.mark.asyncio
    async def test_memory_backend(self):
        repository = await database.init_repository(backend="memory")
        assert repository.name == "memory"

    @pytest.mark.asyncio
    async def test_unknown_backend(self):
        with pytest.raises(ValueError):
            await database.init_repository(backend="redis")

    @pytest.mark.asyncio
    async def test_falls_back_to_memory_when_mongo_is_down(self, monkeypatch):
        async def unreachable(*args, **kwargs):
            raise ServerSelectionTimeoutError("no servers")

        monkeypatch.setattr(database, "connect_to_mongo", unreachable)

        repository = await database.init_repository(backend="mongo", fallback=True)
        assert isinstance(repository, InMemoryRepository)

        with pytest.raises(ServerSelectionTimeoutError):
            await database.init_repository(backend="mongo", fallback=False)


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "OK"


class TestInMemoryRepository:
    @pytest.mark.asyncio
    async def test_records_are_copied(self, repository):
        job = await repository.create_job(_job())
        job.title = "Changed outside the store"

        stored = await repository.get_job(job.id)
        assert stored.title == "SRE"

    @pytest.mark.asyncio
    async def test_one_application_per_job_and_applicant(self, repository):
        job = await repository.create_job(_job())
        await repository.create_application(Application(job_id=job.id, applicant_id="b" * 24, cover_letter="Hi"))

        with pytest.raises(DuplicateRecordError):
            await repository.create_application(
                Application(job_id=job.id, applicant_id="b" * 24, cover_letter="Again")
            )
        assert await repository.count_applications(ApplicationFilters(job_id=job.id)) == 1

    @pytest.mark.asyncio
    async def test_record_status_change_appends_history(self, repository):
        application = await repository.create_application(
            Application(job_id="c" * 24, applicant_id="b" * 24, cover_letter="Hi")
        )
        entry = StatusHistoryEntry(status=ApplicationStatus.REJECTED, changed_by="a" * 24)

        updated = await repository.record_status_change(application.id, entry, {"status": "rejected"})

        assert updated.status == ApplicationStatus.REJECTED
        assert updated.status_history[-1].status == ApplicationStatus.REJECTED
        assert updated.updated_at == entry.changed_at

    @pytest.mark.asyncio
    async def test_missing_records(self, repository):
        entry = StatusHistoryEntry(status=ApplicationStatus.REJECTED)
        assert await repository.get_application("d" * 24) is None
        assert await repository.record_status_change("d" * 24, entry, {}) is None
        assert await repository.update_job("d" * 24, {"title": "x"}) is None
        assert await repository.delete_job("d" * 24) is False

    @pytest.mark.asyncio
    async def test_list_jobs_newest_first(self, repository):
        first = await repository.create_job(_job(title="First"))
        second = await repository.create_job(_job(title="Second"))

        jobs, total = await repository.list_jobs(JobFilters(), skip=0, limit=10)

        assert total == 2
        assert [j.id for j in jobs] == [second.id, first.id]


def test_mongo_job_query_escapes_search():
    query = _job_query(JobFilters(search="c++", min_salary=1000, status="active"))

    assert query["status"] == "active"
    assert query["salary.min"] == {"$gte": 1000}
    assert query["$or"][0] == {"title": {"$regex": r"c\+\+", "$options": "i"}}
