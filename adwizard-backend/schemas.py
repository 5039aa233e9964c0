"""
Pydantic models for data validation in the Ad Wizard backend.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from placeholders import PlaceholderStyle


BrandVoice = Literal[
    "friendly-empathetic", "professional-authoritative", "casual-relatable", "energetic-upbeat"
]
CallToAction = Literal["call-for-quote", "visit-page", "sign-up", "book-call", "message-us"]
AdLength = Literal["15s", "30s", "60s"]
JobStatus = Literal["queued", "processing", "ready", "failed"]


class CamelModel(BaseModel):
    """Models exchanged with the wizard UI use camelCase keys on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Wizard ---

class WizardState(CamelModel):
    """Answers collected by the wizard, steps 1-7, plus the template lock."""
    # Step 1
    brand: str = ""
    industry: str = ""
    brand_voice: str = ""
    # Step 2
    offer: str = ""
    offer_type: str = ""
    primary_benefit: str = ""
    # Step 3
    audience: str = ""
    custom_audience: str = ""
    pain_point: str = ""
    # Step 4
    outcome: str = ""
    proof: str = ""
    proof_type: str = ""
    # Step 5
    cta: str = ""
    length: str = ""
    # Step 6
    geo_targeting: str = ""
    keywords: str = ""
    # Step 7
    selected_creator: str = ""
    no_avatar: bool = False
    # Template lock
    template_locked: bool = False
    template_name: Optional[str] = None


class AdTemplatePayload(CamelModel):
    """Saved answers for steps 1-6. Never carries the creator choice."""
    brand: str
    brand_voice: BrandVoice = "friendly-empathetic"
    offer: str
    primary_benefit: str
    audience: str
    custom_audience: Optional[str] = None
    pain_point: str
    outcome: str
    proof: Optional[str] = None
    cta: CallToAction = "call-for-quote"
    length: AdLength = "30s"
    geo_targeting: Optional[str] = None
    keywords: Optional[str] = None


# --- Video vendor payload ---

class CaptionsSettings(BaseModel):
    enabled: bool = True
    burn_in: bool = True


class StyleSettings(BaseModel):
    tone: str
    pace: str = "medium"


class MusicSettings(BaseModel):
    mood: str = "uplifting"


class AvatarDisabled(BaseModel):
    enabled: Literal[False] = False


class AvatarEnabled(BaseModel):
    enabled: Literal[True] = True
    creator: str


class VideoMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    brand: str
    cta: str
    geo: str
    keywords: str
    benefit: str
    selected_creator: str = Field("no-avatar", alias="selectedCreator")


class VideoPayload(BaseModel):
    """Full render request derived from the wizard answers."""
    script: str
    duration_sec: int
    aspect_ratio: str = "9:16"
    captions: CaptionsSettings = Field(default_factory=CaptionsSettings)
    style: StyleSettings
    music: MusicSettings = Field(default_factory=MusicSettings)
    avatar: Union[AvatarEnabled, AvatarDisabled]
    metadata: VideoMetadata


# --- Script generation ---

class ScriptRequest(BaseModel):
    """Request model for generating an ad script."""
    prompt: str = Field(min_length=1)


class ScriptResponse(CamelModel):
    generated_text: str
    fallback: bool = False


class BuildContentRequest(CamelModel):
    state: WizardState
    script: str = ""
    placeholder_style: PlaceholderStyle = PlaceholderStyle.DOUBLE_CURLY


class BuildContentResponse(CamelModel):
    title: str
    script_prompt: str
    video_payload: Dict[str, Any]
    thumbnail_prompt: str
    target_words: float
    template_prompt: str
    template_payload: Dict[str, Any]
    template_script: str


# --- Video jobs ---

class CreateVideoJobRequest(BaseModel):
    """Request model for submitting a filled script to the video vendor."""
    state: WizardState
    script: str
    title: Optional[str] = None


class JobResponse(BaseModel):
    """Response when submitting a video job."""
    job_id: str
    video_id: str
    status: JobStatus


class StatusUpdate(BaseModel):
    """Local view of a vendor status report."""
    status: JobStatus
    video_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    duration: Optional[float] = None
    error_message: Optional[str] = None


class StatusResponse(StatusUpdate):
    """Response for checking a single job's status."""
    progress: Optional[float] = None


class VideoJobOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    job_id: str
    title: str
    status: JobStatus
    video_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    duration: Optional[float] = None
    error_message: Optional[str] = None
    wizard_data: Optional[Dict[str, Any]] = None
    captions_payload: Optional[Dict[str, Any]] = None
    retry_of: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class VideoJobListResponse(BaseModel):
    jobs: List[VideoJobOut]


class PendingCheckResponse(BaseModel):
    checked: int
    updated: int


class WebhookResponse(BaseModel):
    success: bool
    message: str


class DownloadRequest(BaseModel):
    video_url: str
    filename: Optional[str] = None


class CreatorOut(BaseModel):
    name: str
    image_url: str
    video_url: str


# --- Templates ---

class TemplateActionRequest(BaseModel):
    """Body of POST /templates: one of save, rename or delete."""
    action: str
    name: Optional[str] = None
    payload: Optional[AdTemplatePayload] = None
    id: Optional[str] = None


class AdTemplateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    name: str
    payload: Dict[str, Any]
    created_at: datetime
    updated_at: datetime


class TemplateListResponse(BaseModel):
    templates: List[AdTemplateOut]


class TemplateResponse(BaseModel):
    template: AdTemplateOut


class SuccessResponse(BaseModel):
    success: bool
