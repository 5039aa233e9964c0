"""
CRUD operations for video jobs and ad templates.
"""

import logging
import uuid
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy.orm import Session

from models import AdTemplate, VideoJob
from schemas import StatusUpdate

TERMINAL_STATUSES = ("ready", "failed")


# ============================================================================
# Video jobs
# ============================================================================

def create_video_job(
    db: Session,
    user_id: str,
    job_id: str,
    title: str,
    wizard_data: dict,
    captions_payload: dict,
    status: str = "processing",
    retry_of: Optional[str] = None,
) -> VideoJob:
    job = VideoJob(
        id=str(uuid.uuid4()),
        user_id=user_id,
        job_id=job_id,
        title=title or "AI Video",
        status=status,
        wizard_data=wizard_data,
        captions_payload=captions_payload,
        retry_of=retry_of,
    )
    db.add(job)
    db.commit()
    db.refresh(job)
    return job


def get_job(db: Session, video_id: str, user_id: Optional[str] = None) -> Optional[VideoJob]:
    """Get a job by its local id, optionally scoped to its owner."""
    query = db.query(VideoJob).filter(VideoJob.id == video_id)
    if user_id is not None:
        query = query.filter(VideoJob.user_id == user_id)
    return query.first()


def get_job_by_vendor_id(db: Session, job_id: str, user_id: Optional[str] = None) -> Optional[VideoJob]:
    """Get a job by the id Captions.ai issued for it."""
    query = db.query(VideoJob).filter(VideoJob.job_id == job_id)
    if user_id is not None:
        query = query.filter(VideoJob.user_id == user_id)
    return query.first()


def list_jobs(db: Session, user_id: str) -> List[VideoJob]:
    return (
        db.query(VideoJob)
        .filter(VideoJob.user_id == user_id)
        .order_by(VideoJob.created_at.desc())
        .all()
    )


def list_pending_jobs(db: Session, user_id: str, window_hours: int) -> List[VideoJob]:
    """The user's jobs still rendering that were created inside the window."""
    since = datetime.utcnow() - timedelta(hours=window_hours)
    return (
        db.query(VideoJob)
        .filter(
            VideoJob.user_id == user_id,
            VideoJob.status == "processing",
            VideoJob.created_at >= since,
        )
        .all()
    )


def apply_status_update(db: Session, job: VideoJob, update: StatusUpdate) -> bool:
    """
    Write a mapped vendor status onto ``job``.

    A terminal job is never moved back to processing. Between terminal
    reports the last writer wins. Returns True when the row was written.
    """
    if job.status in TERMINAL_STATUSES and update.status not in TERMINAL_STATUSES:
        logging.info(f"Ignoring '{update.status}' for job {job.job_id}: already {job.status}")
        return False

    job.status = update.status
    if update.status == "ready":
        job.video_url = update.video_url
        job.thumbnail_url = update.thumbnail_url
        job.duration = update.duration
        job.error_message = None
    elif update.status == "failed":
        job.error_message = update.error_message
    db.commit()
    return True


def mark_job_failed(db: Session, job: VideoJob, message: str) -> VideoJob:
    job.status = "failed"
    job.error_message = message
    db.commit()
    return job


# ============================================================================
# Ad templates
# ============================================================================

def save_template(db: Session, user_id: str, name: str, payload: dict) -> AdTemplate:
    """Insert a template, or overwrite the payload of the user's template with that name."""
    name = name.strip()
    template = (
        db.query(AdTemplate)
        .filter(AdTemplate.user_id == user_id, AdTemplate.name == name)
        .first()
    )
    if template:
        template.payload = payload
    else:
        template = AdTemplate(id=str(uuid.uuid4()), user_id=user_id, name=name, payload=payload)
        db.add(template)
    db.commit()
    db.refresh(template)
    return template


def list_templates(db: Session, user_id: str) -> List[AdTemplate]:
    return (
        db.query(AdTemplate)
        .filter(AdTemplate.user_id == user_id)
        .order_by(AdTemplate.created_at.desc())
        .all()
    )


def get_template(db: Session, user_id: str, template_id: str) -> Optional[AdTemplate]:
    return (
        db.query(AdTemplate)
        .filter(AdTemplate.id == template_id, AdTemplate.user_id == user_id)
        .first()
    )


def rename_template(db: Session, user_id: str, template_id: str, name: str) -> Optional[AdTemplate]:
    template = get_template(db, user_id, template_id)
    if not template:
        return None
    template.name = name.strip()
    db.commit()
    db.refresh(template)
    return template


def delete_template(db: Session, user_id: str, template_id: str) -> bool:
    template = get_template(db, user_id, template_id)
    if not template:
        return False
    db.delete(template)
    db.commit()
    return True
