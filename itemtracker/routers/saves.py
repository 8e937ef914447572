"""Save discovery API routes."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from itemtracker.config import settings
from itemtracker.models import SaveCandidate
from itemtracker.services.saves import find_latest_world, list_worlds

router = APIRouter()


@router.get("", response_model=list[SaveCandidate])
async def list_saves(root: Optional[str] = Query(default=None)):
    return list_worlds(root or settings.SAVES_ROOT_DIR)


@router.get("/latest", response_model=SaveCandidate)
async def latest_save(root: Optional[str] = Query(default=None)):
    saves_root = root or settings.SAVES_ROOT_DIR
    latest = find_latest_world(saves_root)
    if latest is None:
        raise HTTPException(404, f"No save found under {saves_root}")
    return SaveCandidate(
        name=latest.name,
        path=str(latest),
        modified_at=int(latest.stat().st_mtime * 1000),
    )
