"""
Builds the LLM prompt and the video vendor payload from wizard answers.
Every function here is pure.
"""

from typing import Any, Dict

from config import SCRIPT_PROMPT_TEMPLATE, WORDS_PER_SECOND
from schemas import (
    AvatarDisabled,
    AvatarEnabled,
    StyleSettings,
    VideoMetadata,
    VideoPayload,
    WizardState,
)


def parse_length(length: str) -> int:
    """'30s' -> 30"""
    return int(length.strip().rstrip("s"))


def target_word_count(seconds: int) -> float:
    # Left unrounded: 15s asks for 37.5 words.
    return seconds * WORDS_PER_SECOND


def format_number(value: float) -> str:
    return f"{value:g}"


def resolve_audience(state: WizardState) -> str:
    if state.audience == "Custom":
        return state.custom_audience
    return state.audience


def style_tone(brand_voice: str) -> str:
    return brand_voice.lower().replace(" & ", "_")


def build_title(state: WizardState) -> str:
    return f"{state.brand} - {state.offer}"


def build_script_prompt(state: WizardState) -> str:
    """Fill the copywriter instruction with the wizard answers."""
    seconds = parse_length(state.length)
    return SCRIPT_PROMPT_TEMPLATE.format(
        length=state.length,
        brand=state.brand,
        audience=resolve_audience(state),
        pain=state.pain_point,
        offer=state.offer,
        outcome=state.outcome,
        tone=state.brand_voice,
        proof=state.proof,
        geo=state.geo_targeting,
        keywords=state.keywords,
        cta=state.cta,
        seconds=seconds,
        words=format_number(target_word_count(seconds)),
    )


def build_video_payload(state: WizardState, script: str) -> VideoPayload:
    if state.no_avatar:
        avatar = AvatarDisabled()
    else:
        avatar = AvatarEnabled(creator=state.selected_creator)

    return VideoPayload(
        script=script,
        duration_sec=parse_length(state.length),
        style=StyleSettings(tone=style_tone(state.brand_voice)),
        avatar=avatar,
        metadata=VideoMetadata(
            brand=state.brand,
            cta=state.cta,
            geo=state.geo_targeting,
            keywords=state.keywords,
            benefit=state.primary_benefit,
            selected_creator=state.selected_creator or "no-avatar",
        ),
    )


def build_captions_request(payload: VideoPayload) -> Dict[str, Any]:
    """The body actually sent to the vendor's create endpoint."""
    return {
        "script": payload.script.strip(),
        "avatar": payload.avatar.model_dump(),
    }


def template_values(state: WizardState) -> Dict[str, str]:
    """Filled answers keyed by placeholder variable, for the template codec."""
    return {
        "brand": state.brand,
        "tone": state.brand_voice,
        "offer": state.offer,
        "benefit": state.primary_benefit,
        "audience": resolve_audience(state),
        "pain": state.pain_point,
        "outcome": state.outcome,
        "proof": state.proof,
        "cta": state.cta,
        "geo": state.geo_targeting,
        "keywords": state.keywords,
    }


def build_content(state: WizardState, script: str = "") -> Dict[str, Any]:
    """Prompt, payload and thumbnail prompt shown on the review step."""
    return {
        "title": build_title(state),
        "script_prompt": build_script_prompt(state),
        "video_payload": build_video_payload(state, script or "Generated script will appear here"),
        "thumbnail_prompt": f"Create a thumbnail for {state.brand} ad about {state.offer}",
        "target_words": target_word_count(parse_length(state.length)),
    }
