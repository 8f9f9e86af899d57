"""
HTTP-level tests for the slash command and OAuth routes.
"""

from urllib.parse import urlencode

import pytest
from fastapi.testclient import TestClient

from conftest import slack_headers

from app.config import get_settings
from app.main import app
from app.models.user import User
from app.services.factory import get_trigger_service


@pytest.fixture
def client(settings, service, vault, blobs):
    # U1 on T1 is linked to user-1
    vault.set_secret("oauth-U1", "xoxp-U1", {"user": "user-1", "team": "T1"})
    blobs.set_blob("users", "user-1", User(id="user-1").to_json())
    user = User.from_json(blobs.get_blob("users", "user-1"))
    user.add_linked_identity("U1", "T1")
    blobs.set_blob("users", "user-1", user.to_json())

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_trigger_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def _post(client, command: str, text: str = "", user_id: str = "U1", headers=None):
    body = urlencode(
        {
            "team_id": "T1",
            "team_domain": "overload",
            "user_id": user_id,
            "user_name": "carolyn",
            "command": f"/{command}",
            "text": text,
        }
    ).encode()
    return client.post(
        f"/slack/{command}", content=body, headers=headers or slack_headers(body)
    )


class TestSlashCommands:
    def test_create_then_trigger(self, client, status_api):
        response = _post(client, "create-trigger", "brb = Back soon (:coffee:) DND for 15m")
        assert response.status_code == 200
        assert response.json()["response_type"] == "ephemeral"
        assert "Created trigger *brb*" in response.json()["text"]

        response = _post(client, "trigger", "brb")
        assert response.status_code == 200
        assert response.json()["text"] == "Triggered *brb* :coffee:"
        assert status_api.calls_for("U1", "start_snooze") == [(15,)]

    def test_list_and_delete(self, client):
        _post(client, "create-trigger", "brb = (:coffee:)")

        listing = _post(client, "list-triggers").json()
        assert "`brb = (:coffee:)`" in listing["blocks"][-1]["text"]["text"]

        assert _post(client, "delete-trigger", "brb").json()["text"] == "Deleted trigger *brb*"
        assert "not defined any triggers" in _post(client, "list-triggers").json()["text"]

    def test_clear_status(self, client, status_api):
        response = _post(client, "clear-status")

        assert response.status_code == 200
        assert "cleared" in response.json()["text"]
        assert status_api.calls_for("U1", "set_custom_status") == [("", "", 0)]

    def test_link_slack(self, client):
        response = _post(client, "link-slack")

        text = response.json()["blocks"][0]["text"]["text"]
        assert "https://slack.com/oauth/v2/authorize?" in text
        assert "Link Slack Account" in text

    def test_handled_errors_are_200(self, client):
        response = _post(client, "trigger", "nope")

        assert response.status_code == 200
        assert response.json()["text"] == "trigger nope not registered"

    def test_unregistered_user_gets_onboarding(self, client):
        response = _post(client, "trigger", "brb", user_id="U404")

        assert response.status_code == 200
        assert "/link-slack" in response.json()["blocks"][0]["text"]["text"]

    def test_bad_signature_is_rejected(self, client, status_api):
        body = b"user_id=U1&text=brb"
        response = client.post(
            "/slack/trigger", content=body, headers=slack_headers(body, "wrong-secret")
        )

        assert response.status_code == 401
        assert "Rejected" in response.json()["detail"]
        assert status_api.calls == []

    def test_unparseable_body(self, client):
        body = b"text=brb"
        response = client.post("/slack/trigger", content=body, headers=slack_headers(body))

        assert response.status_code == 400


class TestOAuthCallback:
    def test_success_redirects_to_quickstart(self, client, oauth, vault):
        oauth.register("code-1", "U2", "T2")

        response = client.get("/oauth", params={"code": "code-1"}, follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == "https://example.com/quickstart"
        assert vault.get_secret("oauth-U2")[1]["team"] == "T2"

    def test_cancelled_flow(self, client):
        response = client.get("/oauth", params={"error": "access_denied"})

        assert response.status_code == 400

    def test_missing_code(self, client):
        response = client.get("/oauth")

        assert response.status_code == 400


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
