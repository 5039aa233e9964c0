"""
Router for ad generation endpoints.
Handles content building, script generation, video job submission,
retries and video downloads.
"""

import logging
import time
from typing import List

import requests
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from auth import get_current_user
from builder import build_captions_request, build_content, build_title, build_video_payload, template_values
from config import CREATOR_PREVIEWS, SUPPORTED_CREATORS
from crud import create_video_job as db_create_video_job, get_job
from database import get_db
from placeholders import create_template_prompt, from_filled_payload, placeholder, to_template
from schemas import (
    BuildContentRequest,
    BuildContentResponse,
    CreateVideoJobRequest,
    CreatorOut,
    DownloadRequest,
    JobResponse,
    ScriptRequest,
    ScriptResponse,
)
from services import CaptionsAPIError, CaptionsClient, ScriptService, ScriptValidator
from tasks import schedule_status_poll
from wizard import incomplete_steps


# Create the router
router = APIRouter(tags=["generation"])


def get_captions_client() -> CaptionsClient:
    return CaptionsClient()


@router.get("/creators", response_model=List[CreatorOut])
async def list_creators():
    """Creators offered on the creator selection step, with preview assets."""
    return [
        CreatorOut(name=name, image_url=CREATOR_PREVIEWS[name][0], video_url=CREATOR_PREVIEWS[name][1])
        for name in SUPPORTED_CREATORS
    ]


@router.post("/build-content", response_model=BuildContentResponse)
async def build_content_preview(request: BuildContentRequest):
    """
    Returns the filled prompt and payload for the review step, along with
    their templated versions in the requested placeholder style.
    """
    try:
        content = build_content(request.state, request.script)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Invalid ad length: '{request.state.length}'")
    payload = content["video_payload"].model_dump(by_alias=True)
    style = request.placeholder_style
    if request.script:
        template_script = to_template(request.script, template_values(request.state), style)
    else:
        template_script = placeholder("script", style)

    return BuildContentResponse(
        title=content["title"],
        script_prompt=content["script_prompt"],
        video_payload=payload,
        thumbnail_prompt=content["thumbnail_prompt"],
        target_words=content["target_words"],
        template_prompt=create_template_prompt(style),
        template_payload=from_filled_payload(payload, style),
        template_script=template_script,
    )


@router.post("/generate-ad-script", response_model=ScriptResponse)
def generate_ad_script(request: ScriptRequest):
    """Generates an ad script. Falls back to a stock script if the LLM fails."""
    script, fallback = ScriptService.generate_with_fallback(request.prompt)
    return ScriptResponse(generated_text=script, fallback=fallback)


def _submit(db: Session, client: CaptionsClient, user_id: str, title: str,
            wizard_data: dict, captions_payload: dict, retry_of: str = None):
    try:
        vendor_job_id = client.create_video(captions_payload)
    except CaptionsAPIError as e:
        logging.error(f"Failed to create video job: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    job = db_create_video_job(
        db,
        user_id=user_id,
        job_id=vendor_job_id,
        title=title,
        wizard_data=wizard_data,
        captions_payload=captions_payload,
        retry_of=retry_of,
    )
    try:
        schedule_status_poll(job.job_id)
    except Exception as e:
        # Best effort: the pending sweep and the webhook still cover this job
        logging.error(f"❌ Could not schedule status polling for job {job.job_id}: {e}")
    logging.info(f"✨ Job {job.job_id} submitted for user {user_id}: '{job.title}'")
    return JobResponse(job_id=job.job_id, video_id=job.id, status=job.status)


@router.post("/create-video-job", response_model=JobResponse)
def create_video_job(
    request: CreateVideoJobRequest,
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_db),
    client: CaptionsClient = Depends(get_captions_client),
):
    """
    Validates the filled script, submits it to Captions.ai, stores the job
    and starts background status polling.
    """
    state = request.state
    script = ScriptValidator(script=request.script, creator=None if state.no_avatar else state.selected_creator).run()

    missing = incomplete_steps(state)
    if missing:
        detail = "; ".join(f"step {step}: {', '.join(fields)}" for step, fields in missing.items())
        raise HTTPException(status_code=422, detail=f"Wizard is incomplete ({detail})")

    payload = build_video_payload(state, script)
    captions_payload = build_captions_request(payload)
    return _submit(
        db,
        client,
        user_id=user_id,
        title=request.title or build_title(state),
        wizard_data=payload.model_dump(by_alias=True),
        captions_payload=captions_payload,
    )


@router.post("/video-jobs/{video_id}/retry", response_model=JobResponse)
def retry_video_job(
    video_id: str,
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_db),
    client: CaptionsClient = Depends(get_captions_client),
):
    """Replays a failed job's stored vendor request as a new job."""
    job = get_job(db, video_id, user_id=user_id)
    if not job:
        raise HTTPException(status_code=404, detail="Video job not found")
    if job.status != "failed":
        raise HTTPException(status_code=409, detail=f"Only failed jobs can be retried (job is {job.status})")
    if not job.captions_payload:
        raise HTTPException(status_code=409, detail="Job has no stored payload to replay")

    return _submit(
        db,
        client,
        user_id=user_id,
        title=job.title,
        wizard_data=job.wizard_data,
        captions_payload=job.captions_payload,
        retry_of=job.id,
    )


@router.post("/download-video")
def download_video(request: DownloadRequest):
    """Proxies a finished video so the browser downloads it as a file."""
    filename = request.filename or f"video_{int(time.time() * 1000)}.mp4"
    logging.info(f"Downloading video from: {request.video_url}")
    try:
        upstream = requests.get(request.video_url, stream=True, timeout=60)
        upstream.raise_for_status()
    except requests.RequestException as e:
        logging.error(f"Download error: {e}")
        raise HTTPException(status_code=502, detail=f"Failed to fetch video: {e}")

    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    if upstream.headers.get("Content-Length"):
        headers["Content-Length"] = upstream.headers["Content-Length"]
    return StreamingResponse(upstream.iter_content(chunk_size=64 * 1024), media_type="video/mp4", headers=headers)
