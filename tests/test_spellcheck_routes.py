"""
Route tests for spellcheck, feedback and ignore rule endpoints.

The correction service runs with the mock provider and db_service calls are
patched, so no database or network is needed.
"""
import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient

from proofline.main import app
from proofline.models.ignore_rule import IgnoreRule
from proofline.services.correction_provider import CorrectionProviderError
from proofline.services.database import db_service


def _rule(user_id, token="teh", issue_type="spelling"):
    return IgnoreRule(
        id=uuid.uuid4(),
        user_id=user_id,
        token=token,
        type=issue_type,
        created_at=datetime.now(timezone.utc)
    )


class TestSpellcheckEndpoint:
    """Tests for POST /api/v1/spellcheck."""

    @pytest.mark.asyncio
    async def test_returns_issues(self, authenticated_client: AsyncClient):
        """Test issues are reported against the markup-stripped text."""
        response = await authenticated_client.post(
            "/api/v1/spellcheck",
            json={"text": "<p>I will <b>recieve</b> the parcel tomorrow</p>"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert len(data["errors"]) == 1
        issue = data["errors"][0]
        assert issue["token"] == "recieve"
        assert issue["offset"] == 7
        assert issue["suggestions"][0] == "receive"
        assert "editId" in issue

    @pytest.mark.asyncio
    async def test_short_text_skips_provider(self, authenticated_client: AsyncClient, correction_provider):
        """Test content below the minimum length gets an empty result."""
        response = await authenticated_client.post("/api/v1/spellcheck", json={"text": "<p>teh cat</p>"})

        assert response.status_code == 200
        assert response.json()["errors"] == []
        assert correction_provider.calls == 0

    @pytest.mark.asyncio
    async def test_rate_limited_request_returns_empty(self, authenticated_client: AsyncClient, correction_service):
        """Test over-limit requests succeed with no issues."""
        correction_service.rate_limiter.max_requests = 1
        body = {"text": "<p>Please recieve this letter today</p>"}

        first = await authenticated_client.post("/api/v1/spellcheck", json=body)
        second = await authenticated_client.post("/api/v1/spellcheck", json={"text": body["text"] + " again"})

        assert len(first.json()["errors"]) == 1
        assert second.status_code == 200
        assert second.json()["errors"] == []

    @pytest.mark.asyncio
    async def test_empty_text_is_rejected(self, authenticated_client: AsyncClient):
        """Test request validation rejects an empty text."""
        response = await authenticated_client.post("/api/v1/spellcheck", json={"text": ""})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_requires_authentication(self, client: AsyncClient):
        """Test requests without a bearer token are refused."""
        response = await client.post("/api/v1/spellcheck", json={"text": "<p>some long enough text</p>"})
        assert response.status_code in (401, 403)

    @pytest.mark.asyncio
    async def test_invalid_token(self, client: AsyncClient):
        """Test a malformed token yields 401."""
        response = await client.post(
            "/api/v1/spellcheck",
            json={"text": "<p>some long enough text</p>"},
            headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_service_unavailable(self, authenticated_client: AsyncClient):
        """Test 503 when the correction service was not initialized."""
        app.state.correction_service = None

        response = await authenticated_client.post("/api/v1/spellcheck", json={"text": "<p>some long enough text</p>"})

        assert response.status_code == 503

    @pytest.mark.asyncio
    async def test_response_has_request_id(self, authenticated_client: AsyncClient):
        """Test the logging middleware echoes the request id."""
        response = await authenticated_client.post(
            "/api/v1/spellcheck",
            json={"text": "<p>teh</p>"},
            headers={"X-Request-ID": "req-123"}
        )
        assert response.headers["X-Request-ID"] == "req-123"


class TestFeedbackEndpoints:
    """Tests for accept/reject feedback."""

    @pytest.mark.asyncio
    async def test_accept_success(self, authenticated_client: AsyncClient, correction_provider, test_user):
        """Test accepted feedback is forwarded with the user's session id."""
        correction_provider.accept_edit = AsyncMock(return_value=None)

        response = await authenticated_client.post("/api/v1/spellcheck/accept/edit-1")

        assert response.status_code == 200
        assert response.json() == {"success": True}
        correction_provider.accept_edit.assert_awaited_once_with("edit-1", f"user-{test_user.id}")

    @pytest.mark.asyncio
    async def test_reject_failure_returns_400(self, authenticated_client: AsyncClient, correction_provider):
        """Test provider failures surface as 400 with success false."""
        correction_provider.reject_edit = AsyncMock(side_effect=CorrectionProviderError("HTTP error: 404", 404))

        response = await authenticated_client.post("/api/v1/spellcheck/reject/edit-1")

        assert response.status_code == 400
        assert response.json() == {"success": False}


class TestIgnoreRuleEndpoints:
    """Tests for ignore rule CRUD."""

    @pytest.mark.asyncio
    async def test_list(self, authenticated_client: AsyncClient, test_user):
        """Test the caller's rules are listed with a total."""
        rules = [_rule(test_user.id, "teh"), _rule(test_user.id, "irregardless", "grammar")]

        with patch.object(db_service, "get_ignore_rules", AsyncMock(return_value=rules)) as mock_get:
            response = await authenticated_client.get("/api/v1/spellcheck/ignored")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert [r["token"] for r in data["ignore_rules"]] == ["teh", "irregardless"]
        assert mock_get.await_args.args[1] == test_user.id

    @pytest.mark.asyncio
    async def test_add_commits(self, authenticated_client: AsyncClient, db_session, test_user):
        """Test adding a rule returns 201 and commits."""
        rule = _rule(test_user.id)

        with patch.object(db_service, "create_ignore_rule", AsyncMock(return_value=rule)) as mock_create:
            response = await authenticated_client.post(
                "/api/v1/spellcheck/ignored",
                json={"token": "teh", "type": "spelling"}
            )

        assert response.status_code == 201
        data = response.json()
        assert data["success"] is True
        assert data["ignore_rule"]["id"] == str(rule.id)
        assert mock_create.await_args.args[2].token == "teh"
        db_session.commit.assert_awaited()

    @pytest.mark.asyncio
    async def test_add_validation(self, authenticated_client: AsyncClient):
        """Test token and type are required."""
        response = await authenticated_client.post("/api/v1/spellcheck/ignored", json={"token": "teh"})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_remove_missing_rule(self, authenticated_client: AsyncClient):
        """Test removing an unknown rule is a 404."""
        with patch.object(db_service, "delete_ignore_rule", AsyncMock(return_value=False)):
            response = await authenticated_client.delete(f"/api/v1/spellcheck/ignored/{uuid.uuid4()}")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_remove_rule(self, authenticated_client: AsyncClient, test_user):
        """Test removing a rule reports one deletion."""
        rule_id = uuid.uuid4()

        with patch.object(db_service, "delete_ignore_rule", AsyncMock(return_value=True)) as mock_delete:
            response = await authenticated_client.delete(f"/api/v1/spellcheck/ignored/{rule_id}")

        assert response.status_code == 200
        assert response.json() == {"success": True, "deleted": 1}
        assert mock_delete.await_args.args[1:] == (rule_id, test_user.id)

    @pytest.mark.asyncio
    async def test_clear(self, authenticated_client: AsyncClient):
        """Test clearing returns the number of removed rules."""
        with patch.object(db_service, "clear_ignore_rules", AsyncMock(return_value=3)):
            response = await authenticated_client.delete("/api/v1/spellcheck/ignored")

        assert response.status_code == 200
        assert response.json()["deleted"] == 3
