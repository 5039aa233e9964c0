# tasks.py

from celery import Celery
import logging

from config import LOG_LEVEL, POLL_INITIAL_DELAY, POLL_MAX_ATTEMPTS, POLL_MAX_DELAY, REDIS_URL
from database import SessionLocal
from crud import TERMINAL_STATUSES, get_job_by_vendor_id, mark_job_failed
from services import CaptionsAPIError, CaptionsClient, refresh_job_status

celery = Celery('tasks', broker=REDIS_URL, backend=REDIS_URL)
logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s - %(levelname)s - %(message)s")


def next_poll_delay(attempt: int) -> int:
    """Seconds to wait before poll number ``attempt + 1``."""
    return min(POLL_INITIAL_DELAY * (2 ** attempt), POLL_MAX_DELAY)


@celery.task(bind=True, max_retries=POLL_MAX_ATTEMPTS)
def poll_video_status_task(self, job_id: str):
    """
    Polls Captions.ai for one job until it reaches ready/failed.
    Each non-terminal answer (or vendor error) reschedules the task with a
    longer delay; after the last attempt the job is marked failed.
    """
    db = SessionLocal()
    attempt = self.request.retries

    try:
        job = get_job_by_vendor_id(db, job_id)
        if not job:
            logging.warning(f"Poll for unknown job {job_id}, stopping")
            return None
        if job.status in TERMINAL_STATUSES:
            return job.status

        try:
            refresh_job_status(db, job, CaptionsClient())
        except CaptionsAPIError as e:
            logging.warning(f"Status check {attempt + 1} for job {job_id} failed: {e}")

        if job.status in TERMINAL_STATUSES:
            logging.info(f"✅ Job {job_id} finished as {job.status} after {attempt + 1} checks")
            return job.status

        if attempt >= self.max_retries:
            mark_job_failed(db, job, f"Timed out waiting for Captions.ai after {attempt + 1} status checks")
            logging.error(f"❌ Gave up polling job {job_id}")
            return job.status
    finally:
        db.close()

    raise self.retry(countdown=next_poll_delay(attempt))


def schedule_status_poll(job_id: str) -> None:
    """Start the background poll for a freshly submitted job."""
    poll_video_status_task.apply_async(args=[job_id], countdown=POLL_INITIAL_DELAY)
    logging.info(f"✨ Status polling scheduled for job {job_id}")
