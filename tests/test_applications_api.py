from datetime import datetime, timedelta, timezone

from jobconnect.models.base import new_id


class TestApplicationScenario:
    def test_apply_review_withdraw(self, client, register, post_job):
        _, r_headers = register("rita", role="recruiter")
        _, a_headers = register("alex")
        job = post_job(r_headers)

        # Apply
        r = client.post(f"/api/applications/apply/{job['id']}",
                        json={"cover_letter": "Hire me"}, headers=a_headers)
        assert r.status_code == 201
        body = r.json()
        assert body["success"] is True
        application = body["data"]["application"]
        assert application["status"] == "submitted"
        assert application["job"]["title"] == "Backend Developer"
        assert len(application["status_history"]) == 1

        r = client.get(f"/api/jobs/{job['id']}")
        assert r.json()["data"]["job"]["applications_count"] == 1

        # Apply again
        r = client.post(f"/api/applications/apply/{job['id']}",
                        json={"cover_letter": "Hire me again"}, headers=a_headers)
        assert r.status_code == 409
        assert r.json() == {"success": False, "message": "You have already applied for this job"}

        # Recruiter shortlists
        r = client.put(f"/api/applications/status/{application['id']}",
                       json={"status": "shortlisted", "notes": "Good fit"}, headers=r_headers)
        assert r.status_code == 200
        updated = r.json()["data"]["application"]
        assert updated["status"] == "shortlisted"
        assert updated["status_label"] == "Shortlisted"
        assert len(updated["status_history"]) == 2
        assert updated["applicant"]["username"] == "alex"

        # Applicant withdraws
        r = client.put(f"/api/applications/withdraw/{application['id']}", headers=a_headers)
        assert r.status_code == 200
        withdrawn = r.json()["data"]["application"]
        assert withdrawn["status"] == "withdrawn"
        assert withdrawn["is_active"] is False

        # Withdrawn is not a final decision, so a second withdraw goes through
        r = client.put(f"/api/applications/withdraw/{application['id']}", headers=a_headers)
        assert r.status_code == 200
        assert len(r.json()["data"]["application"]["status_history"]) == 4

        # Count never goes down
        r = client.get(f"/api/jobs/{job['id']}")
        assert r.json()["data"]["job"]["applications_count"] == 1


class TestApply:
    def test_only_job_seekers_may_apply(self, client, register, post_job):
        _, r_headers = register("rita", role="recruiter")
        job = post_job(r_headers)

        r = client.post(f"/api/applications/apply/{job['id']}",
                        json={"cover_letter": "Me"}, headers=r_headers)
        assert r.status_code == 403
        assert r.json()["success"] is False

    def test_requires_auth(self, client):
        r = client.post(f"/api/applications/apply/{new_id()}", json={"cover_letter": "Me"})
        assert r.status_code == 401

    def test_unknown_job(self, client, register):
        _, a_headers = register("alex")
        r = client.post(f"/api/applications/apply/{new_id()}",
                        json={"cover_letter": "Me"}, headers=a_headers)
        assert r.status_code == 404
        assert r.json()["message"] == "Job not found"

    def test_malformed_job_id(self, client, register):
        _, a_headers = register("alex")
        r = client.post("/api/applications/apply/not-an-id",
                        json={"cover_letter": "Me"}, headers=a_headers)
        assert r.status_code == 400
        assert r.json()["message"] == "Invalid job ID"

    def test_closed_job(self, client, register, post_job):
        _, r_headers = register("rita", role="recruiter")
        _, a_headers = register("alex")
        job = post_job(r_headers, status="closed")

        r = client.post(f"/api/applications/apply/{job['id']}",
                        json={"cover_letter": "Me"}, headers=a_headers)
        assert r.status_code == 400
        assert r.json()["message"] == "This job is no longer accepting applications"

    def test_deadline_passed(self, client, register, post_job):
        _, r_headers = register("rita", role="recruiter")
        _, a_headers = register("alex")
        yesterday = (datetime.now(timezone.utc) - timedelta(days=1)).isoformat()
        job = post_job(r_headers, application_deadline=yesterday)

        r = client.post(f"/api/applications/apply/{job['id']}",
                        json={"cover_letter": "Me"}, headers=a_headers)
        assert r.status_code == 400
        assert r.json()["message"] == "Application deadline has passed"

    def test_cover_letter_is_required(self, client, register, post_job):
        _, r_headers = register("rita", role="recruiter")
        _, a_headers = register("alex")
        job = post_job(r_headers)

        r = client.post(f"/api/applications/apply/{job['id']}", json={}, headers=a_headers)
        assert r.status_code == 400
        assert r.json()["message"] == "Validation failed"

        r = client.post(f"/api/applications/apply/{job['id']}",
                        json={"cover_letter": "x" * 2001}, headers=a_headers)
        assert r.status_code == 400

    def test_profile_resume_that_is_not_a_url(self, client, register, post_job):
        _, r_headers = register("rita", role="recruiter")
        _, doc_headers = register("dana", resume={"url": "https://files.example.com/dana.pdf"})
        _, num_headers = register("nico", resume=42)
        job = post_job(r_headers)

        r = client.post(f"/api/applications/apply/{job['id']}",
                        json={"cover_letter": "Hi"}, headers=doc_headers)
        assert r.status_code == 201
        resume = r.json()["data"]["application"]["resume"]
        assert resume["url"] == "https://files.example.com/dana.pdf"
        assert resume["filename"] == "dana.pdf"

        r = client.post(f"/api/applications/apply/{job['id']}",
                        json={"cover_letter": "Hi"}, headers=num_headers)
        assert r.status_code == 201
        assert r.json()["data"]["application"]["resume"]["url"] is None


class TestStatusUpdates:
    def _apply(self, client, register, post_job):
        _, r_headers = register("rita", role="recruiter")
        _, a_headers = register("alex")
        job = post_job(r_headers)
        r = client.post(f"/api/applications/apply/{job['id']}",
                        json={"cover_letter": "Me"}, headers=a_headers)
        return r.json()["data"]["application"], r_headers, a_headers

    def test_other_recruiter_is_forbidden(self, client, register, post_job):
        application, _, _ = self._apply(client, register, post_job)
        _, other_headers = register("oscar", role="recruiter")

        r = client.put(f"/api/applications/status/{application['id']}",
                       json={"status": "rejected"}, headers=other_headers)
        assert r.status_code == 403

        _, admin_headers = register("ada", role="admin")
        r = client.get(f"/api/applications/{application['id']}", headers=admin_headers)
        assert r.json()["data"]["application"]["status"] == "submitted"
        assert len(r.json()["data"]["application"]["status_history"]) == 1

    def test_job_seeker_cannot_update_status(self, client, register, post_job):
        application, _, a_headers = self._apply(client, register, post_job)

        r = client.put(f"/api/applications/status/{application['id']}",
                       json={"status": "hired"}, headers=a_headers)
        assert r.status_code == 403
        assert "not authorized to access this route" in r.json()["message"]

    def test_unknown_status_is_rejected(self, client, register, post_job):
        application, r_headers, _ = self._apply(client, register, post_job)

        r = client.put(f"/api/applications/status/{application['id']}",
                       json={"status": "accepted"}, headers=r_headers)
        assert r.status_code == 400

    def test_hired_application_cannot_be_withdrawn(self, client, register, post_job):
        application, r_headers, a_headers = self._apply(client, register, post_job)
        client.put(f"/api/applications/status/{application['id']}",
                   json={"status": "hired"}, headers=r_headers)

        r = client.put(f"/api/applications/withdraw/{application['id']}", headers=a_headers)
        assert r.status_code == 400
        assert r.json()["success"] is False

    def test_interview_details_are_stored(self, client, register, post_job):
        application, r_headers, _ = self._apply(client, register, post_job)

        r = client.put(f"/api/applications/status/{application['id']}", json={
            "status": "interview_scheduled",
            "interview_details": {"type": "video", "meeting_link": "https://meet.example.com/abc"},
        }, headers=r_headers)
        assert r.status_code == 200
        assert r.json()["data"]["application"]["interview"]["type"] == "video"

    def test_unknown_application(self, client, register):
        _, r_headers = register("rita", role="recruiter")
        r = client.put(f"/api/applications/status/{new_id()}",
                       json={"status": "rejected"}, headers=r_headers)
        assert r.status_code == 404


class TestListings:
    def test_my_applications(self, client, register, post_job):
        _, r_headers = register("rita", role="recruiter")
        _, a_headers = register("alex")
        first = post_job(r_headers, title="First")
        second = post_job(r_headers, title="Second")
        for job in (first, second):
            client.post(f"/api/applications/apply/{job['id']}",
                        json={"cover_letter": "Me"}, headers=a_headers)

        r = client.get("/api/applications/my?limit=1", headers=a_headers)
        assert r.status_code == 200
        data = r.json()["data"]
        assert data["pagination"] == {"current": 1, "pages": 2, "total": 2, "limit": 1}
        assert len(data["applications"]) == 1
        assert data["applications"][0]["job"]["title"] in {"First", "Second"}

    def test_my_applications_status_filter(self, client, register, post_job):
        _, r_headers = register("rita", role="recruiter")
        _, a_headers = register("alex")
        job = post_job(r_headers)
        r = client.post(f"/api/applications/apply/{job['id']}",
                        json={"cover_letter": "Me"}, headers=a_headers)
        client.put(f"/api/applications/withdraw/{r.json()['data']['application']['id']}", headers=a_headers)

        r = client.get("/api/applications/my?status=submitted", headers=a_headers)
        assert r.json()["data"]["pagination"]["total"] == 0
        r = client.get("/api/applications/my?status=withdrawn", headers=a_headers)
        assert r.json()["data"]["pagination"]["total"] == 1

    def test_job_applications_for_owner(self, client, register, post_job):
        _, r_headers = register("rita", role="recruiter")
        _, a_headers = register("alex")
        _, s_headers = register("sam")
        job = post_job(r_headers)
        for headers in (a_headers, s_headers):
            client.post(f"/api/applications/apply/{job['id']}",
                        json={"cover_letter": "Me"}, headers=headers)

        r = client.get(f"/api/applications/job/{job['id']}", headers=r_headers)
        assert r.status_code == 200
        data = r.json()["data"]
        assert data["job"]["id"] == job["id"]
        assert data["pagination"]["total"] == 2
        assert {a["applicant"]["username"] for a in data["applications"]} == {"alex", "sam"}

    def test_job_applications_forbidden_for_other_recruiter(self, client, register, post_job):
        _, r_headers = register("rita", role="recruiter")
        _, other_headers = register("oscar", role="recruiter")
        job = post_job(r_headers)

        r = client.get(f"/api/applications/job/{job['id']}", headers=other_headers)
        assert r.status_code == 403

    def test_single_application_visibility(self, client, register, post_job):
        _, r_headers = register("rita", role="recruiter")
        _, a_headers = register("alex")
        _, s_headers = register("sam")
        job = post_job(r_headers)
        r = client.post(f"/api/applications/apply/{job['id']}",
                        json={"cover_letter": "Me"}, headers=a_headers)
        application_id = r.json()["data"]["application"]["id"]

        assert client.get(f"/api/applications/{application_id}", headers=a_headers).status_code == 200
        assert client.get(f"/api/applications/{application_id}", headers=r_headers).status_code == 200
        assert client.get(f"/api/applications/{application_id}", headers=s_headers).status_code == 403
        assert client.get(f"/api/applications/{new_id()}", headers=a_headers).status_code == 404
