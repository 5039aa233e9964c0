"""
Router for saved ad templates (wizard steps 1-6).
"""

import logging
from typing import Union

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from auth import get_current_user
from crud import delete_template, list_templates, rename_template, save_template
from database import get_db
from schemas import (
    AdTemplateOut,
    SuccessResponse,
    TemplateActionRequest,
    TemplateListResponse,
    TemplateResponse,
)


router = APIRouter(prefix="/templates", tags=["templates"])


@router.get("", response_model=TemplateListResponse)
def get_templates(user_id: str = Depends(get_current_user), db: Session = Depends(get_db)):
    templates = list_templates(db, user_id)
    return TemplateListResponse(templates=[AdTemplateOut.model_validate(t) for t in templates])


@router.post("", response_model=Union[TemplateResponse, SuccessResponse])
def template_action(
    request: TemplateActionRequest,
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Runs one of the save, rename or delete actions on the caller's templates."""
    if request.action == "save":
        if not (request.name or "").strip() or request.payload is None:
            raise HTTPException(status_code=400, detail="Name and payload are required")
        payload = request.payload.model_dump(by_alias=True, exclude_none=True)
        template = save_template(db, user_id, request.name, payload)
        logging.info(f"Saved template '{template.name}' for user {user_id}")
        return TemplateResponse(template=AdTemplateOut.model_validate(template))

    if request.action == "rename":
        if not request.id or not (request.name or "").strip():
            raise HTTPException(status_code=400, detail="Template ID and new name are required")
        try:
            template = rename_template(db, user_id, request.id, request.name)
        except IntegrityError:
            db.rollback()
            raise HTTPException(status_code=409, detail=f"A template named '{request.name.strip()}' already exists")
        if not template:
            raise HTTPException(status_code=404, detail="Template not found")
        return TemplateResponse(template=AdTemplateOut.model_validate(template))

    if request.action == "delete":
        if not request.id:
            raise HTTPException(status_code=400, detail="Template ID is required")
        if not delete_template(db, user_id, request.id):
            raise HTTPException(status_code=404, detail="Template not found")
        return SuccessResponse(success=True)

    raise HTTPException(status_code=400, detail="Invalid action")
