"""
The 8-step ad wizard: answers, per-step validation, template lock and drafts.

Steps 1-7 collect answers, step 8 reviews the generated script. Moving from
step 7 to step 8 asks the script generator for a script.
"""

import json
import logging
import os
from typing import Callable, Dict, List, Optional, Tuple

from builder import build_script_prompt
from config import DRAFT_DIR, DRAFT_KEY
from schemas import AdTemplatePayload, WizardState
from services import ScriptService

TOTAL_STEPS = 8
REVIEW_STEP = 8

STEP_TITLES = [
    "Brand & Tone",
    "Offer & Key Benefit",
    "Audience & Pain",
    "Outcome & Proof",
    "Goal & Length",
    "Location & Keywords",
    "Creator Selection",
    "Review & Generate",
]

STEP_FIELDS = {
    1: ("brand", "industry", "brand_voice"),
    2: ("offer", "offer_type", "primary_benefit"),
    3: ("audience", "custom_audience", "pain_point"),
    4: ("outcome", "proof", "proof_type"),
    5: ("cta", "length"),
    6: ("geo_targeting", "keywords"),
    7: ("selected_creator", "no_avatar"),
}

# Fields a template lock protects (steps 1-6).
LOCKED_FIELDS = frozenset(name for step in range(1, 7) for name in STEP_FIELDS[step])

TEMPLATE_DEFAULTS = {
    "brand_voice": "friendly-empathetic",
    "cta": "call-for-quote",
    "length": "30s",
}


class WizardValidationError(Exception):
    def __init__(self, step: int, missing: List[str]):
        self.step = step
        self.missing = missing
        super().__init__(f"Step {step} is missing: {', '.join(missing)}")


class WizardLockedError(Exception):
    pass


def missing_fields(state: WizardState, step: int) -> List[str]:
    """Required fields of ``step`` that are still empty."""
    if step == 1:
        required = ["brand", "brand_voice"]
    elif step == 2:
        required = ["offer", "primary_benefit"]
    elif step == 3:
        required = ["audience", "pain_point"]
        if state.audience == "Custom":
            required.append("custom_audience")
    elif step == 4:
        required = ["outcome"]
    elif step == 5:
        required = ["cta", "length"]
    elif step == 7:
        if state.no_avatar or state.selected_creator:
            return []
        return ["selected_creator"]
    else:
        return []
    return [name for name in required if not str(getattr(state, name) or "").strip()]


def can_advance(state: WizardState, step: int) -> bool:
    return not missing_fields(state, step)


def incomplete_steps(state: WizardState) -> Dict[int, List[str]]:
    """Missing fields for every data step, used before submitting a job."""
    result = {}
    for step in range(1, REVIEW_STEP):
        missing = missing_fields(state, step)
        if missing:
            result[step] = missing
    return result


def extract_template(state: WizardState) -> AdTemplatePayload:
    """Snapshot steps 1-6 of ``state`` as a reusable template payload."""
    return AdTemplatePayload(
        brand=state.brand,
        brand_voice=state.brand_voice or TEMPLATE_DEFAULTS["brand_voice"],
        offer=state.offer,
        primary_benefit=state.primary_benefit,
        audience=state.audience,
        custom_audience=state.custom_audience or None,
        pain_point=state.pain_point,
        outcome=state.outcome,
        proof=state.proof or None,
        cta=state.cta or TEMPLATE_DEFAULTS["cta"],
        length=state.length or TEMPLATE_DEFAULTS["length"],
        geo_targeting=state.geo_targeting or None,
        keywords=state.keywords or None,
    )


def apply_template(state: WizardState, payload: AdTemplatePayload, name: str) -> WizardState:
    """
    Copy the template's answers into ``state`` and lock steps 1-6.

    Only fields present in the payload are overwritten. The creator choice
    (step 7) is never touched.
    """
    values = {
        key: ("" if value is None else value)
        for key, value in payload.model_dump(exclude_unset=True).items()
    }
    return state.model_copy(update={**values, "template_locked": True, "template_name": name})


class DraftStore:
    """Device-local storage for one in-progress wizard."""

    def load(self) -> Optional[Tuple[WizardState, int]]:
        raise NotImplementedError

    def save(self, state: WizardState, step: int) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError


class JsonFileDraftStore(DraftStore):
    """Keeps the draft in ``<directory>/<key>.json``. Last write wins."""

    def __init__(self, directory: str = DRAFT_DIR, key: str = DRAFT_KEY):
        self.path = os.path.join(directory, f"{key}.json")

    def load(self):
        if not os.path.exists(self.path):
            return None
        with open(self.path, "r", encoding="utf-8") as f:
            saved = json.load(f)
        return WizardState.model_validate(saved["wizardData"]), int(saved["currentStep"])

    def save(self, state, step):
        os.makedirs(os.path.dirname(self.path), exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({"wizardData": state.model_dump(by_alias=True), "currentStep": step}, f)

    def clear(self):
        if os.path.exists(self.path):
            os.remove(self.path)


def _default_script_generator(prompt: str) -> str:
    script, _ = ScriptService.generate_with_fallback(prompt)
    return script


class AdWizard:
    """One wizard session: current answers, current step and the generated script."""

    def __init__(
        self,
        draft_store: Optional[DraftStore] = None,
        script_generator: Optional[Callable[[str], str]] = None,
    ):
        self.draft_store = draft_store
        self.script_generator = script_generator or _default_script_generator
        self.state = WizardState()
        self.step = 1
        self.script = ""

    @classmethod
    def open(cls, draft_store: DraftStore, script_generator=None) -> "AdWizard":
        """Start a wizard, restoring the saved draft if there is one."""
        wizard = cls(draft_store=draft_store, script_generator=script_generator)
        saved = draft_store.load()
        if saved:
            wizard.state, wizard.step = saved
            logging.info(f"Restored wizard draft at step {wizard.step}")
        return wizard

    @property
    def title(self) -> str:
        return STEP_TITLES[self.step - 1]

    @property
    def progress(self) -> float:
        return self.step / TOTAL_STEPS * 100

    def update(self, **fields) -> WizardState:
        unknown = set(fields) - set(WizardState.model_fields)
        if unknown:
            raise ValueError(f"Unknown wizard fields: {', '.join(sorted(unknown))}")
        if self.state.template_locked:
            locked = LOCKED_FIELDS.intersection(fields)
            if locked:
                raise WizardLockedError(
                    f"Template '{self.state.template_name}' is applied; unlock to edit {', '.join(sorted(locked))}"
                )
        self.state = self.state.model_copy(update=fields)
        return self.state

    def select_creator(self, name: str) -> WizardState:
        self.state = self.state.model_copy(update={"selected_creator": name, "no_avatar": False})
        return self.state

    def set_no_avatar(self, no_avatar: bool) -> WizardState:
        self.state = self.state.model_copy(update={"no_avatar": no_avatar, "selected_creator": ""})
        return self.state

    def can_advance(self) -> bool:
        return can_advance(self.state, self.step)

    def next(self) -> int:
        if self.step >= TOTAL_STEPS:
            return self.step
        missing = missing_fields(self.state, self.step)
        if missing:
            raise WizardValidationError(self.step, missing)
        self.step += 1
        if self.step == REVIEW_STEP:
            self.generate_script()
        return self.step

    def back(self) -> int:
        self.step = max(1, self.step - 1)
        return self.step

    def generate_script(self) -> str:
        self.script = self.script_generator(build_script_prompt(self.state))
        return self.script

    def apply_template(self, payload: AdTemplatePayload, name: str) -> WizardState:
        self.state = apply_template(self.state, payload, name)
        return self.state

    def unlock(self) -> WizardState:
        self.state = self.state.model_copy(update={"template_locked": False, "template_name": None})
        return self.state

    def save_draft(self) -> None:
        if self.draft_store is not None:
            self.draft_store.save(self.state, self.step)
            logging.info(f"Saved wizard draft at step {self.step}")

    def reset(self) -> None:
        self.state = WizardState()
        self.step = 1
        self.script = ""
        if self.draft_store is not None:
            self.draft_store.clear()

    def complete(self) -> None:
        """Called once the video job was submitted."""
        self.reset()
