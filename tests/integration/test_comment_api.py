"""
Integration tests for comment, notification and navigation endpoints.
"""
import pytest

from portal.models import Project
from tests.conftest import ORGANIZATION_ID, auth_headers


@pytest.fixture
def people(agency):
    """
    Plain IDs and auth headers for the agency fixture.

    Failed requests roll back the shared session, which expires ORM rows, so
    tests work from these values instead of the model instances.
    """
    return {
        "project_id": agency["project"].id,
        "admin_id": agency["admin"].id,
        "client_id": agency["client"].id,
        "member_id": agency["member"].id,
        "admin": auth_headers(agency["admin"]),
        "member": auth_headers(agency["member"]),
        "client": auth_headers(agency["client"]),
        "idle_member": auth_headers(agency["idle_member"]),
        "outsider": auth_headers(agency["outsider"]),
    }


@pytest.mark.integration
class TestCommentEndpoints:
    """Test cases for the comment API."""

    async def _post(self, client, headers, project_id, content, **extra):
        response = await client.post(
            "/api/comments",
            json={"project_id": project_id, "content": content, **extra},
            headers=headers,
        )
        assert response.status_code == 201, response.text
        return response.json()

    async def test_requires_authentication(self, test_client, people):
        response = await test_client.get(f"/api/projects/{people['project_id']}/comments")

        assert response.status_code == 401

    async def test_invalid_token(self, test_client, people):
        response = await test_client.get(
            f"/api/projects/{people['project_id']}/comments",
            headers={"Authorization": "Bearer not-a-token"},
        )

        assert response.status_code == 401

    async def test_thread_round_trip(self, test_client, people):
        project_id = people["project_id"]
        root = await self._post(test_client, people["admin"], project_id, "Kickoff notes @Carol #kickoff")
        reply = await self._post(
            test_client, people["client"], project_id, "Looks good @Alice", parent_id=root["id"]
        )
        await self._post(
            test_client, people["admin"], project_id, "Thanks!", parent_id=reply["id"]
        )

        response = await test_client.get(
            f"/api/projects/{project_id}/comments", params={"sort": "oldest"}, headers=people["member"]
        )

        assert response.status_code == 200
        threads = response.json()
        assert len(threads) == 1
        assert threads[0]["id"] == root["id"]
        assert threads[0]["mentions"] == [people["client_id"]]
        assert threads[0]["tags"] == ["kickoff"]
        assert threads[0]["replies"][0]["id"] == reply["id"]
        assert threads[0]["replies"][0]["author_type"] == "client"
        assert len(threads[0]["replies"][0]["replies"]) == 1

    async def test_status_filter_and_bad_sort(self, test_client, people):
        project_id = people["project_id"]
        first = await self._post(test_client, people["admin"], project_id, "first")
        await self._post(test_client, people["admin"], project_id, "second")
        await test_client.patch(f"/api/comments/{first['id']}/resolve", headers=people["admin"])

        resolved = await test_client.get(
            f"/api/projects/{project_id}/comments", params={"status": "resolved"}, headers=people["admin"]
        )
        bad_sort = await test_client.get(
            f"/api/projects/{project_id}/comments", params={"sort": "random"}, headers=people["admin"]
        )

        assert [c["id"] for c in resolved.json()] == [first["id"]]
        assert bad_sort.status_code == 400

    async def test_available_users(self, test_client, people):
        response = await test_client.get(
            f"/api/projects/{people['project_id']}/available-users", headers=people["admin"]
        )

        assert response.status_code == 200
        assert [(u["name"], u["role"]) for u in response.json()] == [
            ("Carol", "client"), ("Tom", "team_member")
        ]

    async def test_unassigned_member_forbidden(self, test_client, people):
        response = await test_client.get(
            f"/api/projects/{people['project_id']}/comments", headers=people["idle_member"]
        )

        assert response.status_code == 403

    async def test_other_organization_forbidden(self, test_client, people):
        response = await test_client.post(
            "/api/comments",
            json={"project_id": people["project_id"], "content": "hello"},
            headers=people["outsider"],
        )

        assert response.status_code == 403

    async def test_reply_to_missing_parent(self, test_client, people):
        response = await test_client.post(
            "/api/comments",
            json={"project_id": people["project_id"], "content": "reply", "parent_id": 9999},
            headers=people["admin"],
        )

        assert response.status_code == 404

    async def test_reply_to_parent_on_other_project(self, test_client, test_db, people):
        other = Project(title="Brand Refresh", organization_id=ORGANIZATION_ID, client_id=people["client_id"])
        test_db.add(other)
        await test_db.commit()
        other_id = other.id
        parent = await self._post(test_client, people["admin"], people["project_id"], "Homepage thread")

        response = await test_client.post(
            "/api/comments",
            json={"project_id": other_id, "content": "reply", "parent_id": parent["id"]},
            headers=people["admin"],
        )
        listed = await test_client.get(f"/api/projects/{other_id}/comments", headers=people["admin"])

        assert response.status_code == 400
        assert listed.json() == []

    async def test_resolver_outside_organization_rejected(self, test_client, agency, people):
        outsider_id = agency["outsider"].id
        comment = await self._post(test_client, people["client"], people["project_id"], "Typo in footer")

        rejected = await test_client.patch(
            f"/api/comments/{comment['id']}/resolve",
            json={"resolved_by": outsider_id},
            headers=people["admin"],
        )
        delegated = await test_client.patch(
            f"/api/comments/{comment['id']}/resolve",
            json={"resolved_by": people["member_id"]},
            headers=people["admin"],
        )

        assert rejected.status_code == 400
        assert delegated.status_code == 200
        assert delegated.json()["resolved_by"] == people["member_id"]

    async def test_empty_content_rejected(self, test_client, people):
        response = await test_client.post(
            "/api/comments",
            json={"project_id": people["project_id"], "content": ""},
            headers=people["admin"],
        )

        assert response.status_code == 422

    async def test_get_update_and_replies(self, test_client, people):
        project_id = people["project_id"]
        root = await self._post(test_client, people["member"], project_id, "Draft ready")
        reply = await self._post(test_client, people["admin"], project_id, "On it", parent_id=root["id"])

        fetched = await test_client.get(f"/api/comments/{root['id']}", headers=people["member"])
        replies = await test_client.get(f"/api/comments/{root['id']}/replies", headers=people["member"])
        updated = await test_client.put(
            f"/api/comments/{root['id']}",
            json={"content": "Draft ready @Alice #draft", "priority": "urgent"},
            headers=people["member"],
        )
        forbidden = await test_client.put(
            f"/api/comments/{reply['id']}", json={"content": "edited"}, headers=people["client"]
        )

        assert fetched.json()["content"] == "Draft ready"
        assert [r["id"] for r in replies.json()] == [reply["id"]]
        assert updated.status_code == 200
        assert updated.json()["mentions"] == [people["admin_id"]]
        assert updated.json()["tags"] == ["draft"]
        assert updated.json()["priority"] == "urgent"
        assert forbidden.status_code == 403

    async def test_status_workflow(self, test_client, people):
        comment = await self._post(test_client, people["client"], people["project_id"], "Logo is blurry")

        started = await test_client.patch(
            f"/api/comments/{comment['id']}/status", json={"status": "in_progress"}, headers=people["member"]
        )
        resolved = await test_client.patch(
            f"/api/comments/{comment['id']}/resolve", headers=people["member"]
        )
        reopened = await test_client.patch(
            f"/api/comments/{comment['id']}/status", json={"status": "open"}, headers=people["admin"]
        )

        assert started.json()["status"] == "in_progress"
        assert resolved.json()["status"] == "resolved"
        assert resolved.json()["resolved_by"] == people["member_id"]
        assert reopened.status_code == 400

    async def test_delete(self, test_client, people):
        comment = await self._post(test_client, people["admin"], people["project_id"], "temporary")

        denied = await test_client.delete(f"/api/comments/{comment['id']}", headers=people["client"])
        deleted = await test_client.delete(f"/api/comments/{comment['id']}", headers=people["admin"])
        missing = await test_client.get(f"/api/comments/{comment['id']}", headers=people["admin"])

        assert denied.status_code == 403
        assert deleted.status_code == 204
        assert missing.status_code == 404


@pytest.mark.integration
class TestNotificationEndpoints:
    """Test cases for the notification API."""

    async def test_mention_creates_notification(self, test_client, people):
        await test_client.post(
            "/api/comments",
            json={"project_id": people["project_id"], "content": "@Alice can you approve?"},
            headers=people["client"],
        )

        listed = await test_client.get("/api/notifications", headers=people["admin"])
        notification = listed.json()[0]
        marked = await test_client.patch(
            f"/api/notifications/{notification['id']}/read", headers=people["admin"]
        )
        unread = await test_client.get(
            "/api/notifications", params={"unread_only": True}, headers=people["admin"]
        )

        assert notification["type"] == "mention"
        assert notification["is_read"] is False
        assert marked.json()["is_read"] is True
        assert unread.json() == []


@pytest.mark.integration
class TestNavigationEndpoint:
    """Test cases for the navigation API."""

    async def test_client_navigation(self, test_client, people):
        response = await test_client.get("/api/navigation", headers=people["client"])

        body = response.json()
        assert body["role"] == "client"
        assert "/clients" not in body["routes"]
        assert body["routes"][:2] == ["/dashboard", "/projects"]

    async def test_health(self, test_client):
        response = await test_client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
