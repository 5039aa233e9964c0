# adwizard-backend/tests/test_services.py

import pytest
import requests
from fastapi import HTTPException

import services
from crud import create_video_job
from services import (
    CaptionsAPIError,
    CaptionsClient,
    ScriptGenerationError,
    ScriptService,
    ScriptValidator,
    map_vendor_status,
    refresh_job_status,
    sign_webhook_body,
    verify_webhook_signature,
)


class FakeResponse:
    def __init__(self, status_code=200, data=None, text=""):
        self.status_code = status_code
        self._data = data if data is not None else {}
        self.text = text

    @property
    def ok(self):
        return self.status_code < 400

    def raise_for_status(self):
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        return self._data


# ---------------------------------------------------------------------------
# ScriptValidator
# ---------------------------------------------------------------------------

def test_validator_strips_filled_script():
    assert ScriptValidator("  Call Acme today!  ").run() == "Call Acme today!"


@pytest.mark.parametrize("script", ["", "   ", None])
def test_validator_requires_a_script(script):
    with pytest.raises(HTTPException) as exc:
        ScriptValidator(script).run()

    assert exc.value.status_code == 400
    assert exc.value.detail == "Script is required"


def test_validator_rejects_placeholders():
    with pytest.raises(HTTPException) as exc:
        ScriptValidator("Hi {{name}}, call {{brand}} today").run()

    assert exc.value.status_code == 400
    assert exc.value.detail == "Template detected. Use FILLED script, not placeholders."


def test_validator_checks_the_creator():
    assert ScriptValidator("Call now", creator="Leah-1").run() == "Call now"

    with pytest.raises(HTTPException) as exc:
        ScriptValidator("Call now", creator="Nobody-9").run()

    assert exc.value.status_code == 400
    assert "Invalid creator selection: Nobody-9" in exc.value.detail


# ---------------------------------------------------------------------------
# ScriptService
# ---------------------------------------------------------------------------

def test_generate_script_returns_model_text(monkeypatch):
    sent = {}

    def fake_post(url, json=None, headers=None, timeout=None):
        sent.update(url=url, json=json, headers=headers)
        return FakeResponse(data={"choices": [{"message": {"content": "  Save big with Acme.  "}}]})

    monkeypatch.setattr(services, "OPENAI_API_KEY", "sk-test")
    monkeypatch.setattr(services.requests, "post", fake_post)

    assert ScriptService.generate_script("Write an ad") == "Save big with Acme."
    assert sent["headers"]["Authorization"] == "Bearer sk-test"
    assert sent["json"]["messages"][1] == {"role": "user", "content": "Write an ad"}
    assert sent["json"]["max_completion_tokens"] == 800


def test_generate_script_needs_an_api_key(monkeypatch):
    monkeypatch.setattr(services, "OPENAI_API_KEY", "")

    with pytest.raises(ScriptGenerationError):
        ScriptService.generate_script("Write an ad")


def test_empty_model_answer_is_an_error(monkeypatch):
    monkeypatch.setattr(services, "OPENAI_API_KEY", "sk-test")
    monkeypatch.setattr(
        services.requests, "post",
        lambda *args, **kwargs: FakeResponse(data={"choices": [{"message": {"content": "   "}}]}),
    )

    with pytest.raises(ScriptGenerationError):
        ScriptService.generate_script("Write an ad")


def test_fallback_script_when_the_llm_fails(monkeypatch):
    def failing_post(*args, **kwargs):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(services, "OPENAI_API_KEY", "sk-test")
    monkeypatch.setattr(services.requests, "post", failing_post)

    script, fallback = ScriptService.generate_with_fallback("Write an ad")

    assert fallback is True
    assert script == services.FALLBACK_SCRIPT


# ---------------------------------------------------------------------------
# CaptionsClient
# ---------------------------------------------------------------------------

def test_create_video_posts_to_creator_endpoint(monkeypatch):
    sent = {}

    def fake_post(url, json=None, headers=None, timeout=None):
        sent.update(url=url, json=json, headers=headers)
        return FakeResponse(data={"id": 42})

    monkeypatch.setattr(services.requests, "post", fake_post)
    client = CaptionsClient(api_key="cap-key", base_url="https://captions.test/v1/", workspace_id="ws-1")

    job_id = client.create_video({"script": "Call now", "avatar": {"enabled": False}})

    assert job_id == "42"
    assert sent["url"] == "https://captions.test/v1/creator/videos"
    assert sent["headers"]["x-api-key"] == "cap-key"
    assert sent["headers"]["x-workspace-id"] == "ws-1"


def test_create_video_forbidden(monkeypatch):
    monkeypatch.setattr(services.requests, "post", lambda *args, **kwargs: FakeResponse(403, text="nope"))

    with pytest.raises(CaptionsAPIError) as exc:
        CaptionsClient(api_key="cap-key").create_video({"script": "Call now"})

    assert exc.value.status_code == 403
    assert str(exc.value).startswith("Forbidden")


def test_create_video_without_job_id(monkeypatch):
    monkeypatch.setattr(services.requests, "post", lambda *args, **kwargs: FakeResponse(data={"status": "queued"}))

    with pytest.raises(CaptionsAPIError):
        CaptionsClient(api_key="cap-key").create_video({"script": "Call now"})


def test_client_needs_an_api_key():
    with pytest.raises(CaptionsAPIError):
        CaptionsClient(api_key="").create_video({"script": "Call now"})


def test_get_status_error_carries_status_code(monkeypatch):
    monkeypatch.setattr(services.requests, "get", lambda *args, **kwargs: FakeResponse(500, text="boom"))

    with pytest.raises(CaptionsAPIError) as exc:
        CaptionsClient(api_key="cap-key").get_status("cap_1")

    assert exc.value.status_code == 500
    assert str(exc.value) == "API Error: 500 - boom"


# ---------------------------------------------------------------------------
# Status mapping
# ---------------------------------------------------------------------------

def test_completed_maps_to_ready():
    update = map_vendor_status({
        "status": "completed",
        "url": "https://cdn.test/v.mp4",
        "thumbnail": "https://cdn.test/t.jpg",
        "duration": 29.5,
    })

    assert update.status == "ready"
    assert update.video_url == "https://cdn.test/v.mp4"
    assert update.thumbnail_url == "https://cdn.test/t.jpg"
    assert update.duration == 29.5


def test_error_maps_to_failed():
    assert map_vendor_status({"status": "error", "message": "bad avatar"}).error_message == "bad avatar"
    assert map_vendor_status({"status": "failed"}).error_message == "Video generation failed"


def test_structured_error_is_flattened():
    update = map_vendor_status({"status": "error", "error": {"code": "E1", "message": "bad"}})

    assert update.status == "failed"
    assert update.error_message == "bad"

    update = map_vendor_status({"status": "failed", "error": {"code": "E2"}})
    assert update.error_message == "{'code': 'E2'}"


@pytest.mark.parametrize("duration", ["00:30", {"seconds": 30}, True])
def test_unparseable_duration_is_dropped(duration):
    update = map_vendor_status({"status": "completed", "url": "https://cdn.test/v.mp4", "duration": duration})

    assert update.status == "ready"
    assert update.video_url == "https://cdn.test/v.mp4"
    assert update.duration is None


def test_numeric_string_duration_is_parsed():
    assert map_vendor_status({"status": "ready", "duration": "30.5"}).duration == 30.5


@pytest.mark.parametrize("vendor_status", ["queued", "rendering", None])
def test_anything_else_is_processing(vendor_status):
    assert map_vendor_status({"status": vendor_status}).status == "processing"


def test_refresh_never_regresses_a_finished_job(db, captions):
    job = create_video_job(db, "user-1", "cap_1", "Acme", {}, {"script": "Call now"})
    captions.statuses["cap_1"] = {"status": "completed", "video_url": "https://cdn.test/v.mp4"}

    refresh_job_status(db, job, captions)
    assert job.status == "ready"

    captions.statuses["cap_1"] = {"status": "processing"}
    refresh_job_status(db, job, captions)

    assert job.status == "ready"
    assert job.video_url == "https://cdn.test/v.mp4"


# ---------------------------------------------------------------------------
# Webhook signatures
# ---------------------------------------------------------------------------

def test_webhook_signature_round_trip():
    body = b'{"job_id": "cap_1", "status": "completed"}'
    signature = sign_webhook_body(body, "s3cret")

    assert verify_webhook_signature(body, signature, "s3cret")
    assert verify_webhook_signature(body, f"sha256={signature}", "s3cret")
    assert not verify_webhook_signature(body + b" ", signature, "s3cret")
    assert not verify_webhook_signature(body, signature, "other")
    assert not verify_webhook_signature(body, None, "s3cret")
    assert not verify_webhook_signature(body, signature, "")
