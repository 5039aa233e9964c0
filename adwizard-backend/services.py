"""
Service classes for the Ad Wizard backend.
Contains ScriptValidator, ScriptService and CaptionsClient, plus the
vendor status mapping shared by polling and the webhook.
"""

import hashlib
import hmac
import logging
from typing import Any, Dict, Optional, Tuple

import requests
from fastapi import HTTPException
from sqlalchemy.orm import Session

from config import (
    CAPTIONS_API_BASE,
    CAPTIONS_API_KEY,
    CAPTIONS_TIMEOUT,
    CAPTIONS_WORKSPACE_ID,
    FALLBACK_SCRIPT,
    OPENAI_API_KEY,
    OPENAI_API_URL,
    OPENAI_MAX_TOKENS,
    OPENAI_MODEL,
    OPENAI_TIMEOUT,
    SUPPORTED_CREATORS,
    SYSTEM_PROMPT,
)
from crud import apply_status_update
from models import VideoJob
from placeholders import looks_like_template
from schemas import StatusUpdate


class ScriptGenerationError(Exception):
    pass


class CaptionsAPIError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ScriptValidator:
    """Checks a script and creator choice before anything is sent to the vendor."""

    def __init__(self, script: str, creator: Optional[str] = None):
        self.script = (script or "").strip()
        self.creator = creator or None

    def _check_not_empty(self):
        if not self.script:
            raise HTTPException(status_code=400, detail="Script is required")

    def _check_not_template(self):
        if looks_like_template(self.script):
            logging.warning("Rejected script that still contains placeholders")
            raise HTTPException(
                status_code=400,
                detail="Template detected. Use FILLED script, not placeholders.",
            )

    def _check_creator(self):
        if self.creator and self.creator not in SUPPORTED_CREATORS:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid creator selection: {self.creator}. Must be one of: {', '.join(SUPPORTED_CREATORS)}",
            )

    def run(self) -> str:
        self._check_not_empty()
        self._check_not_template()
        self._check_creator()
        return self.script


class ScriptService:
    """Handles LLM communication for ad script generation."""

    @staticmethod
    def generate_script(prompt: str) -> str:
        if not OPENAI_API_KEY:
            raise ScriptGenerationError("OPENAI_API_KEY is not configured")

        logging.info(f"📝 Sending script prompt to {OPENAI_MODEL} ({len(prompt)} chars)")
        payload = {
            "model": OPENAI_MODEL,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "max_completion_tokens": OPENAI_MAX_TOKENS,
        }
        headers = {"Authorization": f"Bearer {OPENAI_API_KEY}", "Content-Type": "application/json"}
        try:
            response = requests.post(OPENAI_API_URL, json=payload, headers=headers, timeout=OPENAI_TIMEOUT)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise ScriptGenerationError(f"Script generation request failed: {e}") from e

        choices = data.get("choices") or [{}]
        text = (choices[0].get("message") or {}).get("content") or ""
        if not text.strip():
            raise ScriptGenerationError("The model returned an empty script")
        return text.strip()

    @staticmethod
    def generate_with_fallback(prompt: str) -> Tuple[str, bool]:
        """Returns (script, used_fallback). Never raises for LLM failures."""
        try:
            return ScriptService.generate_script(prompt), False
        except ScriptGenerationError as e:
            logging.warning(f"⚠️ Script generation failed, using fallback script: {e}")
            return FALLBACK_SCRIPT, True


class CaptionsClient:
    """Thin wrapper over the Captions.ai creator video endpoints."""

    def __init__(self, api_key: str = CAPTIONS_API_KEY, base_url: str = CAPTIONS_API_BASE,
                 workspace_id: str = CAPTIONS_WORKSPACE_ID, timeout: int = CAPTIONS_TIMEOUT):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.workspace_id = workspace_id
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        if not self.api_key:
            raise CaptionsAPIError("Captions.ai API key not configured")
        headers = {
            "x-api-key": self.api_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.workspace_id:
            headers["x-workspace-id"] = self.workspace_id
        return headers

    def create_video(self, body: Dict[str, Any]) -> str:
        """Submit a render request and return the vendor job id."""
        headers = self._headers()
        logging.info(f"🎬 Submitting video job to Captions.ai (script length {len(body.get('script', ''))})")
        try:
            response = requests.post(f"{self.base_url}/creator/videos", json=body, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise CaptionsAPIError(f"Could not reach Captions.ai: {e}") from e

        if response.status_code == 403:
            raise CaptionsAPIError("Forbidden from Captions.ai. Check x-api-key and workspace id.", 403)
        if not response.ok:
            logging.error(f"❌ Captions.ai create failed: {response.status_code} {response.text}")
            raise CaptionsAPIError(f"Captions.ai error: {response.status_code} {response.text}", response.status_code)

        data = response.json()
        job_id = data.get("job_id") or data.get("id")
        if not job_id:
            raise CaptionsAPIError("Captions.ai response did not include a job id")
        return str(job_id)

    def get_status(self, job_id: str) -> Dict[str, Any]:
        try:
            response = requests.get(
                f"{self.base_url}/creator/videos/{job_id}/status",
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise CaptionsAPIError(f"Could not reach Captions.ai: {e}") from e

        if not response.ok:
            raise CaptionsAPIError(f"API Error: {response.status_code} - {response.text}", response.status_code)
        return response.json()


def _text(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, dict):
        return _text(value.get("message")) or str(value)
    return str(value)


def _seconds(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        logging.warning(f"Ignoring unparseable duration from Captions.ai: {value!r}")
        return None


def map_vendor_status(data: Dict[str, Any]) -> StatusUpdate:
    """
    Translate a Captions.ai status report (poll or webhook) to our status.
    Off-type fields are coerced or dropped, never raised on.
    """
    vendor_status = data.get("status")
    if vendor_status in ("completed", "ready"):
        return StatusUpdate(
            status="ready",
            video_url=_text(data.get("video_url") or data.get("url")),
            thumbnail_url=_text(data.get("thumbnail_url") or data.get("thumbnail")),
            duration=_seconds(data.get("duration")),
        )
    if vendor_status in ("failed", "error"):
        return StatusUpdate(
            status="failed",
            error_message=_text(data.get("error")) or _text(data.get("message")) or "Video generation failed",
        )
    return StatusUpdate(status="processing")


def refresh_job_status(db: Session, job: VideoJob, client: CaptionsClient) -> StatusUpdate:
    """Ask the vendor about ``job`` and store the answer."""
    data = client.get_status(job.job_id)
    update = map_vendor_status(data)
    if apply_status_update(db, job, update):
        logging.info(f"Job {job.job_id} is now {job.status}")
    return update


def sign_webhook_body(body: bytes, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def verify_webhook_signature(body: bytes, signature: Optional[str], secret: str) -> bool:
    if not secret or not signature:
        return False
    expected = sign_webhook_body(body, secret)
    return hmac.compare_digest(expected, signature.strip().removeprefix("sha256="))
