"""
Configuration file for the Ad Wizard backend.
Contains all global constants, vendor settings and prompt engineering text.
"""

import os

# --- Constants ---
PROJECT_ROOT = os.getcwd()
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./adwizard.db")
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
DRAFT_DIR = os.getenv("DRAFT_DIR", os.path.join(PROJECT_ROOT, "drafts"))
DRAFT_KEY = "adWizardDraft"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")

# --- LLM (script generation) ---
OPENAI_API_URL = os.getenv("OPENAI_API_URL", "https://api.openai.com/v1/chat/completions")
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-5-2025-08-07")
OPENAI_MAX_TOKENS = 800
OPENAI_TIMEOUT = 120

# --- Captions.ai (video rendering) ---
CAPTIONS_API_BASE = os.getenv("CAPTIONS_API_BASE", "https://api.captions.ai/v1")
CAPTIONS_API_KEY = os.getenv("CAPTIONS_API_KEY", "")
CAPTIONS_WORKSPACE_ID = os.getenv("CAPTIONS_WORKSPACE_ID", "")
CAPTIONS_WEBHOOK_SECRET = os.getenv("CAPTIONS_WEBHOOK_SECRET", "")
CAPTIONS_TIMEOUT = 60

# --- Status polling ---
POLL_INITIAL_DELAY = int(os.getenv("POLL_INITIAL_DELAY", "10"))
POLL_MAX_DELAY = int(os.getenv("POLL_MAX_DELAY", "300"))
POLL_MAX_ATTEMPTS = int(os.getenv("POLL_MAX_ATTEMPTS", "30"))
PENDING_JOB_WINDOW_HOURS = int(os.getenv("PENDING_JOB_WINDOW_HOURS", "24"))

# --- Creators ---
SUPPORTED_CREATORS = [
    "Alan-1", "Cam-1", "Carter-1", "Douglas-1", "Jason",
    "Leah-1", "Madison-1", "Monica-1", "Violet-1",
]

_DRIVE_THUMB = "https://drive.google.com/thumbnail?id={}&sz=w400"
_SAMPLE_VIDEO = "https://commondatastorage.googleapis.com/gtv-videos-bucket/sample/{}.mp4"

# Static creator -> preview asset table shown on the creator selection step.
CREATOR_PREVIEWS = {
    "Alan-1": (_DRIVE_THUMB.format("1RF9dKmcjPdNpXS__WGv-plVqc1WV1tfB"), _SAMPLE_VIDEO.format("BigBuckBunny")),
    "Cam-1": (_DRIVE_THUMB.format("1pX1zc7JthBwqYtiSV5LM4_Hw7Llj47NS"), _SAMPLE_VIDEO.format("ElephantsDream")),
    "Carter-1": (_DRIVE_THUMB.format("1lQf7N6S5v2RnSvxhKhlnBitt_v2Rk0Kt"), _SAMPLE_VIDEO.format("ForBiggerBlazes")),
    "Douglas-1": (_DRIVE_THUMB.format("1pq3z55igHaAGnzsTm9AWPhijeOpi0b1f"), _SAMPLE_VIDEO.format("ForBiggerEscapes")),
    "Jason": (_DRIVE_THUMB.format("1odqVmHsGnUF6M2nQ8zn7oBHEwLLd0Fgn"), _SAMPLE_VIDEO.format("ForBiggerFun")),
    "Leah-1": (_DRIVE_THUMB.format("1XONuP0SEWfdxbcT9dQjBO_eWzmrZcMk-"), _SAMPLE_VIDEO.format("ForBiggerJoyrides")),
    "Madison-1": (_DRIVE_THUMB.format("1g3yq2Z63r8MofeSmHvF1EWnVjLZH7rHm"), _SAMPLE_VIDEO.format("ForBiggerMeltdowns")),
    "Monica-1": (_DRIVE_THUMB.format("1nHounF8SnIOgYFTa4N4pn2btIGW0uVLT"), _SAMPLE_VIDEO.format("Sintel")),
    "Violet-1": (_DRIVE_THUMB.format("1VI8VX9-I2o9PLy90sr6Kr5PpqqAQQPZf"), _SAMPLE_VIDEO.format("TearsOfSteel")),
}

# --- Prompt Engineering Section ---

SYSTEM_PROMPT = (
    "You are a world-class direct-response copywriter. "
    "Write natural, flowing ad scripts with perfect pacing and no section labels."
)

# Speaking pace used to turn a duration into a word budget.
WORDS_PER_SECOND = 2.5

SCRIPT_PROMPT_TEMPLATE = """You are an expert direct-response copywriter creating a high-converting {length} video ad script for {brand}.

TARGET: {audience} who are struggling with: {pain}
SOLUTION: {offer} that delivers: {outcome}
TONE: {tone}
PROOF: {proof}
LOCATION: {geo}
KEYWORDS TO INCLUDE: {keywords}
CALL TO ACTION: {cta}

Create a smooth, natural-flowing {seconds}-second video script that feels conversational and authentic. The script should grab attention immediately, clearly present the problem and solution, include credibility elements, and end with a strong call to action.

CRITICAL TIMING: This must be exactly {seconds} seconds when read at normal speaking pace (approximately 2.5 words per second, so {words} words total). Count your words carefully.

Write as one continuous, engaging script without section labels or formatting. Make it sound like a real person talking directly to the viewer, not like marketing copy."""

# Returned when the LLM is unavailable so the wizard never blocks.
FALLBACK_SCRIPT = (
    "HOOK: Are you tired of overpaying for insurance? "
    "BODY: Our customers save an average of $400 per year while getting better coverage "
    "and peace of mind with our A+ rated service. "
    "CTA: Call now for your free quote!"
)
