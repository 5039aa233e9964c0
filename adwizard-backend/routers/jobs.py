"""
Router for the video library: job listing, status checks and the
Captions.ai webhook.
"""

import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request
from sqlalchemy.orm import Session

import config
from auth import get_current_user
from crud import (
    TERMINAL_STATUSES,
    apply_status_update,
    get_job_by_vendor_id,
    list_jobs,
    list_pending_jobs,
    mark_job_failed,
)
from database import get_db
from routers.generation import get_captions_client
from schemas import PendingCheckResponse, StatusResponse, VideoJobListResponse, VideoJobOut, WebhookResponse
from services import CaptionsAPIError, CaptionsClient, map_vendor_status, refresh_job_status, verify_webhook_signature


router = APIRouter(tags=["jobs"])


@router.get("/video-jobs", response_model=VideoJobListResponse)
def list_video_jobs(user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    """The caller's video library, newest first."""
    return VideoJobListResponse(jobs=[VideoJobOut.model_validate(job) for job in list_jobs(db, user_id)])


@router.get("/check-video-status", response_model=StatusResponse)
def check_video_status(
    job_id: str = Query(...),
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_db),
    client: CaptionsClient = Depends(get_captions_client),
):
    """
    Checks the status of one job. Finished jobs answer from the database;
    others are refreshed from Captions.ai first.
    """
    job = get_job_by_vendor_id(db, job_id, user_id=user_id)
    if not job:
        raise HTTPException(status_code=404, detail="Video job not found")

    if job.status in TERMINAL_STATUSES:
        return StatusResponse(
            status=job.status,
            video_url=job.video_url,
            thumbnail_url=job.thumbnail_url,
            duration=job.duration,
            error_message=job.error_message,
        )

    try:
        data = client.get_status(job_id)
    except CaptionsAPIError as e:
        logging.error(f"Captions.ai status API error for job {job_id}: {e}")
        if e.status_code is None:
            # Transport or configuration problem: the render may still be running
            raise HTTPException(status_code=502, detail=str(e))
        mark_job_failed(db, job, str(e))
        return StatusResponse(status="failed", error_message=f"API Error: {e.status_code}", progress=0)

    update = map_vendor_status(data)
    apply_status_update(db, job, update)

    progress = data.get("progress")
    if progress is None:
        progress = {"ready": 100, "processing": 50}.get(job.status, 0)
    return StatusResponse(
        status=job.status,
        video_url=job.video_url,
        thumbnail_url=job.thumbnail_url,
        duration=job.duration,
        error_message=job.error_message,
        progress=progress,
    )


@router.post("/check-pending-jobs", response_model=PendingCheckResponse)
def check_pending_jobs(
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_db),
    client: CaptionsClient = Depends(get_captions_client),
):
    """Refreshes every job of the caller still rendering from the last day."""
    pending = list_pending_jobs(db, user_id, config.PENDING_JOB_WINDOW_HOURS)
    logging.info(f"Found {len(pending)} pending jobs for user {user_id}")

    checked = 0
    updated = 0
    for job in pending:
        checked += 1
        try:
            update = refresh_job_status(db, job, client)
        except CaptionsAPIError as e:
            logging.error(f"Status check failed for job {job.job_id}: {e}")
            continue
        if update.status in TERMINAL_STATUSES:
            updated += 1

    return PendingCheckResponse(checked=checked, updated=updated)


@router.post("/captions-webhook", response_model=WebhookResponse)
async def captions_webhook(
    request: Request,
    x_captions_signature: Optional[str] = Header(None, alias="X-Captions-Signature"),
    db: Session = Depends(get_db),
):
    """Status callback from Captions.ai. The body must carry a valid HMAC signature."""
    if not config.CAPTIONS_WEBHOOK_SECRET:
        logging.error("Webhook received but CAPTIONS_WEBHOOK_SECRET is not configured")
        raise HTTPException(status_code=503, detail="Webhook secret not configured")

    body = await request.body()
    if not verify_webhook_signature(body, x_captions_signature, config.CAPTIONS_WEBHOOK_SECRET):
        logging.warning("Rejected webhook with a missing or invalid signature")
        raise HTTPException(status_code=401, detail="Invalid webhook signature")

    try:
        data = json.loads(body)
    except ValueError:
        raise HTTPException(status_code=400, detail="Webhook body is not valid JSON")

    if not isinstance(data, dict):
        raise HTTPException(status_code=400, detail="Webhook body must be a JSON object")

    job_id = data.get("job_id") or data.get("id")
    if not job_id:
        raise HTTPException(status_code=400, detail="No job_id in webhook payload")

    job = get_job_by_vendor_id(db, str(job_id))
    if not job:
        raise HTTPException(status_code=404, detail=f"Unknown job {job_id}")

    update = map_vendor_status(data)
    apply_status_update(db, job, update)
    logging.info(f"Webhook updated job {job_id} to status: {job.status}")
    return WebhookResponse(success=True, message=f"Job {job_id} updated to {job.status}")
