"""Tracker API routes."""

from pathlib import Path
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from itemtracker.config import settings
from itemtracker.dependencies import ItemCatalogDep, TrackerServiceDep
from itemtracker.models import (
    CycleReport,
    IgnoreToggleRequest,
    ItemRow,
    TrackerStats,
    TrackingStartRequest,
)
from itemtracker.services.saves import find_latest_world

router = APIRouter()


@router.post("/start", response_model=TrackerStats)
async def start_tracking(body: TrackingStartRequest, service: TrackerServiceDep):
    if body.save_path:
        save_dir = Path(body.save_path).expanduser()
    else:
        save_dir = find_latest_world(settings.SAVES_ROOT_DIR)
        if save_dir is None:
            raise HTTPException(404, f"No save found under {settings.SAVES_ROOT_DIR}")
    try:
        return await service.start_tracking(save_dir)
    except ValueError as exc:
        raise HTTPException(404, str(exc)) from exc


@router.post("/stop")
async def stop_tracking(service: TrackerServiceDep):
    await service.stop_tracking()
    return {"status": "stopped"}


@router.post("/scan", response_model=CycleReport)
async def scan_now(service: TrackerServiceDep):
    try:
        return await service.run_cycle()
    except ValueError as exc:
        raise HTTPException(409, str(exc)) from exc


@router.get("/stats", response_model=TrackerStats)
async def get_stats(service: TrackerServiceDep):
    try:
        return service.stats()
    except ValueError as exc:
        raise HTTPException(404, str(exc)) from exc


@router.get("/items", response_model=list[ItemRow])
async def list_items(
    service: TrackerServiceDep,
    search: Optional[str] = Query(default=None),
    missing_only: bool = Query(default=False),
):
    if service.save_dir is None:
        raise HTTPException(404, "No save is being tracked")
    try:
        return service.list_items(search=search, missing_only=missing_only)
    except ValueError as exc:
        raise HTTPException(400, str(exc)) from exc


@router.post("/ignore", response_model=TrackerStats)
async def toggle_ignore(body: IgnoreToggleRequest, service: TrackerServiceDep):
    if service.save_dir is None:
        raise HTTPException(404, "No save is being tracked")
    try:
        return await service.toggle_ignore(body.item_id)
    except ValueError as exc:
        raise HTTPException(400, str(exc)) from exc


@router.get("/catalog", response_model=list[str])
async def get_catalog(catalog: ItemCatalogDep):
    return catalog.sorted_items()
