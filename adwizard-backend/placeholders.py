"""
Placeholder ("templated") rendering of prompts and video payloads.

A templated view swaps every filled answer for a token such as ``{{brand}}``
so the prompt or payload can be shared and reused. The conversion is
one-directional: nothing here turns a templated string back into values.
"""

import copy
import re
from enum import Enum
from typing import Dict, Mapping

from config import SCRIPT_PROMPT_TEMPLATE


class PlaceholderStyle(str, Enum):
    CURLY = "curly"
    DOUBLE_CURLY = "double-curly"
    SQUARE = "square"
    ANGLE = "angle"


_FORMATS = {
    PlaceholderStyle.CURLY: "{{{}}}",
    PlaceholderStyle.DOUBLE_CURLY: "{{{{{}}}}}",
    PlaceholderStyle.SQUARE: "[{}]",
    PlaceholderStyle.ANGLE: "<<{}>>",
}

PLACEHOLDER_STYLES = [
    {"style": PlaceholderStyle.CURLY.value, "label": "Curly", "example": "{variable}"},
    {"style": PlaceholderStyle.DOUBLE_CURLY.value, "label": "Double Curly", "example": "{{variable}}"},
    {"style": PlaceholderStyle.SQUARE.value, "label": "Square", "example": "[variable]"},
    {"style": PlaceholderStyle.ANGLE.value, "label": "Angle", "example": "<<variable>>"},
]

PLACEHOLDER_VARIABLES = (
    "brand", "tone", "offer", "benefit", "audience", "pain", "outcome",
    "proof", "cta", "platform", "aspect_ratio", "seconds", "geo",
    "keywords", "avatar_gender", "avatar_age", "avatar_attire",
    "avatar_setting", "no_avatar", "script",
)

# Any bracketed span in one of the four styles.
TEMPLATE_PATTERN = re.compile(r"(\{\{.*\}\}|\{.*\}|<<.*>>|\[.*\])")

_DURATION_PATTERN = re.compile(r"\b(15|30|60)(-second|s)\b")


def placeholder(variable: str, style: PlaceholderStyle = PlaceholderStyle.DOUBLE_CURLY) -> str:
    """Render the token for ``variable`` in the given style."""
    if variable not in PLACEHOLDER_VARIABLES:
        raise ValueError(f"Unknown placeholder variable: {variable}")
    return _FORMATS[PlaceholderStyle(style)].format(variable)


def looks_like_template(text: str) -> bool:
    """True when ``text`` still carries placeholder syntax of any style."""
    return bool(TEMPLATE_PATTERN.search(text or ""))


def create_template_prompt(style: PlaceholderStyle = PlaceholderStyle.DOUBLE_CURLY) -> str:
    """The script prompt with every answer replaced by its token."""
    seconds = placeholder("seconds", style)
    return SCRIPT_PROMPT_TEMPLATE.format(
        length=seconds,
        brand=placeholder("brand", style),
        audience=placeholder("audience", style),
        pain=placeholder("pain", style),
        offer=placeholder("offer", style),
        outcome=placeholder("outcome", style),
        tone=placeholder("tone", style),
        proof=placeholder("proof", style),
        geo=placeholder("geo", style),
        keywords=placeholder("keywords", style),
        cta=placeholder("cta", style),
        seconds=seconds,
        words=f"{seconds} * 2.5",
    )


def to_template(
    filled_text: str,
    values: Mapping[str, str],
    style: PlaceholderStyle = PlaceholderStyle.DOUBLE_CURLY,
) -> str:
    """
    Replace each filled value in ``filled_text`` with its token.

    ``values`` maps placeholder variables to the text that was filled in.
    Everything is swapped in a single pass, longest value first, so a value
    that contains another one is swapped as a whole and text inside a token
    is never rewritten. Tokens already present are kept as they are. Empty
    values are skipped.
    """
    tokens = {placeholder(variable, style): placeholder(variable, style) for variable in PLACEHOLDER_VARIABLES}
    for variable, value in values.items():
        value = str(value or "")
        if value.strip():
            tokens.setdefault(value, placeholder(variable, style))

    alternatives = [re.escape(value) for value in sorted(tokens, key=len, reverse=True)]
    alternatives.append(_DURATION_PATTERN.pattern)
    pattern = re.compile("|".join(alternatives))

    def swap(match):
        return tokens.get(match.group(0)) or placeholder("seconds", style)

    return pattern.sub(swap, filled_text)


def from_filled_payload(payload: Dict, style: PlaceholderStyle = PlaceholderStyle.DOUBLE_CURLY) -> Dict:
    """Templated copy of a video payload dict. The input is left untouched."""
    def fmt(variable):
        return placeholder(variable, style)

    templated = copy.deepcopy(dict(payload))

    templated["script"] = fmt("script")
    templated["duration_sec"] = fmt("seconds")
    templated["aspect_ratio"] = fmt("aspect_ratio")

    avatar = templated.get("avatar") or {}
    if avatar.get("enabled") is True:
        avatar["gender"] = fmt("avatar_gender")
        avatar["age"] = fmt("avatar_age")
        avatar["attire"] = fmt("avatar_attire")
        avatar["setting"] = fmt("avatar_setting")
        templated["avatar"] = avatar
    else:
        templated["avatar"] = {"enabled": fmt("no_avatar")}

    if templated.get("style"):
        templated["style"]["tone"] = fmt("tone")

    if templated.get("metadata"):
        metadata = templated["metadata"]
        metadata["brand"] = fmt("brand")
        metadata["cta"] = fmt("cta")
        metadata["geo"] = fmt("geo")
        metadata["keywords"] = fmt("keywords")
        metadata["benefit"] = fmt("benefit")
        metadata["platform"] = fmt("platform")

    return templated
