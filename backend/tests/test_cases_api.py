"""
IdeaFlow Backend — Case, ProcessedCase and Project API Tests
==============================================================

What:  The HTTP surface of the case lifecycle, from posting a brief to
       reading the closed project.

Test Strategy:
    ✅ Multipart case creation (cover + attachments) and its validation
    ✅ `files` is always a list, even for NULL / corrupt stored values
    ✅ Accept → ProcessedCase, complete → Project, read back over HTTP
    ✅ Filters on processed-cases and projects
"""

import os
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from ideaflow.config import settings


def _attachments(count):
    return [("files", (f"brief-{i}.pdf", b"%PDF-1.4", "application/pdf")) for i in range(count)]


class TestCreateCase:

    @pytest.mark.asyncio
    async def test_create_with_cover_and_files(self, client, make_user):
        owner = await make_user("owner@example.com")

        response = await client.post(
            "/api/cases",
            data={"userId": str(owner), "title": "Logo", "theme": "Branding"},
            files=[("cover", ("cover.PNG", b"png", "image/png"))] + _attachments(2),
        )

        assert response.status_code == 200, response.text
        body = response.json()
        assert body["message"] == "Case created successfully"

        case = (await client.get(f"/api/cases/{body['id']}")).json()
        assert case["title"] == "Logo"
        assert case["theme"] == "Branding"
        assert case["description"] == ""
        assert case["status"] == "open"
        assert case["userId"] == owner
        assert case["userEmail"] == "owner@example.com"
        assert case["cover"].startswith("/uploads/") and case["cover"].endswith(".png")
        assert len(case["files"]) == 2
        assert all(path.endswith(".pdf") for path in case["files"])

    @pytest.mark.asyncio
    async def test_create_without_files(self, client, make_user):
        owner = await make_user("owner@example.com")

        response = await client.post("/api/cases", data={"userId": str(owner), "title": "Copywriting"})
        case = (await client.get(f"/api/cases/{response.json()['id']}")).json()

        assert case["files"] == []
        assert case["cover"] is None

    @pytest.mark.asyncio
    async def test_missing_title(self, client, make_user):
        owner = await make_user("owner@example.com")

        response = await client.post("/api/cases", data={"userId": str(owner)})

        assert response.status_code == 400
        assert response.json()["details"]["fields"] == ["title"]

    @pytest.mark.asyncio
    async def test_unknown_owner(self, client):
        response = await client.post("/api/cases", data={"userId": "77", "title": "Orphan"})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_too_many_files_rejected_before_storing(self, client, make_user, storage):
        owner = await make_user("owner@example.com")

        response = await client.post(
            "/api/cases",
            data={"userId": str(owner), "title": "Too much"},
            files=_attachments(settings.max_attachments + 1),
        )

        assert response.status_code == 400
        assert os.listdir(storage.root) == []
        assert (await client.get("/api/cases")).json() == []

    @pytest.mark.asyncio
    async def test_failed_insert_removes_stored_uploads(self, client, make_user, storage):
        owner = await make_user("owner@example.com")
        failing = OperationalError("INSERT INTO cases", {}, Exception("disk I/O error"))

        with patch.object(AsyncSession, "flush", AsyncMock(side_effect=failing)):
            response = await client.post(
                "/api/cases",
                data={"userId": str(owner), "title": "Lost"},
                files=[("cover", ("cover.png", b"png", "image/png"))] + _attachments(1),
            )

        assert response.status_code == 500
        assert os.listdir(storage.root) == []
        assert (await client.get("/api/cases")).json() == []


class TestReadCases:

    @pytest.mark.asyncio
    async def test_list_newest_first_with_owner_filter(self, client, make_user, make_case):
        alice = await make_user("alice@example.com")
        bob = await make_user("bob@example.com")
        first = await make_case(alice, title="First")
        second = await make_case(alice, title="Second")
        await make_case(bob, title="Bob's")

        everything = (await client.get("/api/cases")).json()
        mine = (await client.get(f"/api/cases?userId={alice}")).json()

        assert len(everything) == 3
        assert [c["id"] for c in mine] == [second, first]
        assert {c["userEmail"] for c in mine} == {"alice@example.com"}

    @pytest.mark.asyncio
    async def test_unknown_case(self, client):
        response = await client.get("/api/cases/999")
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_ids_beyond_integer_column_are_not_found(self, client):
        too_big = 2**63

        assert (await client.get(f"/api/cases/{too_big}")).status_code == 404
        assert (await client.get(f"/api/processed-cases/{too_big}")).status_code == 404
        assert (await client.get(f"/api/projects/{too_big}")).status_code == 404
        assert (await client.get(f"/api/cases?userId={too_big}")).json() == []
        assert (await client.get(f"/api/projects?userId={too_big}")).json() == []
        accepted = await client.put(f"/api/cases/{too_big}/accept", json={"executorId": 1})
        assert accepted.status_code == 404

    @pytest.mark.asyncio
    async def test_null_and_corrupt_files_read_as_empty_list(self, client, database, make_user, make_case):
        owner = await make_user("owner@example.com")
        null_case = await make_case(owner, files=["/uploads/1.pdf"])
        corrupt_case = await make_case(owner, files=["/uploads/2.pdf"])
        async with database.session() as s:
            await s.execute(text("UPDATE cases SET files = NULL WHERE id = :id"), {"id": null_case})
            await s.execute(text("UPDATE cases SET files = 'not json' WHERE id = :id"), {"id": corrupt_case})
            await s.commit()

        assert (await client.get(f"/api/cases/{null_case}")).json()["files"] == []
        assert (await client.get(f"/api/cases/{corrupt_case}")).json()["files"] == []
        listed = (await client.get("/api/cases")).json()
        assert all(c["files"] == [] for c in listed)

    @pytest.mark.asyncio
    async def test_repeated_reads_are_identical(self, client, make_user, make_case):
        owner = await make_user("owner@example.com")
        case_id = await make_case(owner, files=["/uploads/1.pdf", "/uploads/2.pdf"])

        first = await client.get(f"/api/cases/{case_id}")
        second = await client.get(f"/api/cases/{case_id}")

        assert first.content == second.content

    @pytest.mark.asyncio
    async def test_api_responses_are_not_cacheable(self, client):
        response = await client.get("/api/cases")
        assert "no-store" in response.headers["cache-control"]
        assert response.headers["pragma"] == "no-cache"


class TestLifecycleOverHttp:

    @pytest.mark.asyncio
    async def test_accept_then_complete(self, client, make_user, make_case):
        owner = await make_user("owner@example.com")
        executor = await make_user("exec@example.com")
        case_id = await make_case(owner, title="Mobile app", files=["/uploads/spec.pdf"])

        accepted = await client.put(f"/api/cases/{case_id}/accept", json={"executorId": executor})
        assert accepted.status_code == 200
        assert accepted.json()["message"] == "Case accepted"
        assert accepted.json()["caseId"] == case_id
        processed_id = accepted.json()["processedCaseId"]

        case = (await client.get(f"/api/cases/{case_id}")).json()
        assert case["status"] == "accepted"

        processed = (await client.get(f"/api/processed-cases?executorId={executor}")).json()
        assert len(processed) == 1
        assert processed[0]["id"] == processed_id
        assert processed[0]["caseId"] == case_id
        assert processed[0]["executorId"] == executor
        assert processed[0]["executorEmail"] == "exec@example.com"
        assert processed[0]["userEmail"] == "owner@example.com"
        assert processed[0]["status"] == "in_process"
        assert processed[0]["files"] == ["/uploads/spec.pdf"]

        completed = await client.put(
            f"/api/processed-cases/{processed_id}/complete",
            json={"userId": executor, "description": "Shipped to both stores"},
        )
        assert completed.status_code == 200
        assert completed.json()["message"] == "Project created successfully"
        project_id = completed.json()["projectId"]

        assert (await client.get(f"/api/processed-cases/{processed_id}")).status_code == 404

        project = (await client.get(f"/api/projects/{project_id}")).json()
        assert project["title"] == "Mobile app"
        assert project["description"] == "Shipped to both stores"
        assert project["files"] == ["/uploads/spec.pdf"]
        assert project["status"] == "closed"
        assert project["executorEmail"] == "exec@example.com"
        assert project["userEmail"] == "owner@example.com"
        assert project["caseId"] == case_id

    @pytest.mark.asyncio
    async def test_accept_twice_is_conflict(self, client, make_user, make_case):
        owner = await make_user("owner@example.com")
        first = await make_user("first@example.com")
        second = await make_user("second@example.com")
        case_id = await make_case(owner)

        await client.put(f"/api/cases/{case_id}/accept", json={"executorId": first})
        response = await client.put(f"/api/cases/{case_id}/accept", json={"executorId": second})

        assert response.status_code == 400
        assert response.json()["error"] == "conflict"
        assert len((await client.get("/api/processed-cases")).json()) == 1

    @pytest.mark.asyncio
    async def test_accept_requires_executor(self, client, make_user, make_case):
        owner = await make_user("owner@example.com")
        case_id = await make_case(owner)

        response = await client.put(f"/api/cases/{case_id}/accept", json={})

        assert response.status_code == 400
        assert response.json()["details"]["fields"] == ["executorId"]

    @pytest.mark.asyncio
    async def test_complete_by_stranger_is_not_found(self, client, make_user, make_case):
        owner = await make_user("owner@example.com")
        executor = await make_user("exec@example.com")
        stranger = await make_user("stranger@example.com")
        case_id = await make_case(owner)
        accepted = await client.put(f"/api/cases/{case_id}/accept", json={"executorId": executor})
        processed_id = accepted.json()["processedCaseId"]

        response = await client.put(
            f"/api/processed-cases/{processed_id}/complete", json={"userId": stranger}
        )

        assert response.status_code == 404
        assert response.json()["message"] == "Processed case not found or not assigned to you"
        assert (await client.get(f"/api/processed-cases/{processed_id}")).status_code == 200
        assert (await client.get("/api/projects")).json() == []

    @pytest.mark.asyncio
    async def test_complete_requires_user_id(self, client):
        response = await client.put("/api/processed-cases/1/complete", json={"title": "x"})
        assert response.status_code == 400


class TestProcessedCaseFiles:

    async def _accepted(self, client, make_user, make_case):
        owner = await make_user("owner@example.com")
        executor = await make_user("exec@example.com")
        case_id = await make_case(owner, files=["/uploads/brief.pdf"])
        accepted = await client.put(f"/api/cases/{case_id}/accept", json={"executorId": executor})
        return accepted.json()["processedCaseId"]

    @pytest.mark.asyncio
    async def test_upload_appends_to_existing_files(self, client, make_user, make_case):
        processed_id = await self._accepted(client, make_user, make_case)

        response = await client.post(
            f"/api/processed-cases/{processed_id}/upload-files",
            files=[
                ("extraFiles", ("draft.zip", b"zip", "application/zip")),
                ("extraFiles", ("notes.txt", b"txt", "text/plain")),
            ],
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Files added"
        assert body["files"][0] == "/uploads/brief.pdf"
        assert len(body["files"]) == 3

        reread = (await client.get(f"/api/processed-cases/{processed_id}")).json()
        assert reread["files"] == body["files"]

    @pytest.mark.asyncio
    async def test_upload_without_files(self, client, make_user, make_case):
        processed_id = await self._accepted(client, make_user, make_case)

        response = await client.post(
            f"/api/processed-cases/{processed_id}/upload-files", data={"note": "nothing"}
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_upload_to_unknown_processed_case(self, client, storage):
        response = await client.post(
            "/api/processed-cases/999/upload-files",
            files=[("extraFiles", ("draft.zip", b"zip", "application/zip"))],
        )
        assert response.status_code == 404
        assert os.listdir(storage.root) == []


class TestListFilters:

    @pytest.mark.asyncio
    async def test_projects_by_owner_or_executor_email(self, client, make_user, make_case):
        owner = await make_user("owner@example.com")
        executor = await make_user("exec@example.com")
        other = await make_user("other@example.com")
        for title in ("One", "Two"):
            case_id = await make_case(owner, title=title)
            accepted = await client.put(f"/api/cases/{case_id}/accept", json={"executorId": executor})
            await client.put(
                f"/api/processed-cases/{accepted.json()['processedCaseId']}/complete",
                json={"userId": executor},
            )

        by_owner = (await client.get(f"/api/projects?userId={owner}")).json()
        by_executor = (await client.get("/api/projects?userEmail=exec@example.com")).json()
        by_other = (await client.get(f"/api/projects?userId={other}")).json()

        assert [p["title"] for p in by_owner] == ["One", "Two"]
        assert [p["title"] for p in by_executor] == ["One", "Two"]
        assert by_other == []

    @pytest.mark.asyncio
    async def test_processed_cases_by_owner(self, client, make_user, make_case):
        alice = await make_user("alice@example.com")
        bob = await make_user("bob@example.com")
        executor = await make_user("exec@example.com")
        for owner in (alice, bob):
            case_id = await make_case(owner)
            await client.put(f"/api/cases/{case_id}/accept", json={"executorId": executor})

        alice_view = (await client.get(f"/api/processed-cases?userId={alice}")).json()

        assert len(alice_view) == 1
        assert alice_view[0]["userId"] == alice
