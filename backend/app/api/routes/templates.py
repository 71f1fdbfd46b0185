"""Template catalog endpoints."""

from fastapi import APIRouter, HTTPException, status

from backend.app.catalog import get_template, list_templates
from backend.app.models.templates import DocConfig

router = APIRouter(prefix="/templates", tags=["templates"])


@router.get("", response_model=list[DocConfig])
async def get_templates() -> list[DocConfig]:
    """List templates in catalog order."""
    return list_templates()


@router.get("/{template_id}", response_model=DocConfig)
async def get_template_by_id(template_id: str) -> DocConfig:
    """Fetch one template."""
    try:
        return get_template(template_id)
    except KeyError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Template not found") from e
