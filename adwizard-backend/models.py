# models.py

from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, Float, String, Text, UniqueConstraint
from database import Base


class VideoJob(Base):
    """One render request sent to Captions.ai and its lifecycle."""

    __tablename__ = "video_jobs"

    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, index=True, nullable=False)
    job_id = Column(String, unique=True, index=True, nullable=False)  # vendor-issued
    title = Column(String, nullable=False, default="AI Video")
    status = Column(String, default="queued")  # queued, processing, ready, failed
    video_url = Column(String, nullable=True)
    thumbnail_url = Column(String, nullable=True)
    duration = Column(Float, nullable=True)
    error_message = Column(Text, nullable=True)
    wizard_data = Column(JSON, nullable=True)  # full payload built from the wizard
    captions_payload = Column(JSON, nullable=True)  # exact body sent to the vendor, replayed on retry
    retry_of = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class AdTemplate(Base):
    """Saved wizard answers (steps 1-6), one row per user and name."""

    __tablename__ = "ad_templates"
    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_ad_templates_user_name"),)

    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, index=True, nullable=False)
    name = Column(String, nullable=False)
    payload = Column(JSON, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
