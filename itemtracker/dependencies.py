"""
Dependency injection for FastAPI routes.

Provides typed service dependencies that enable IDE navigation (Ctrl+Click).
"""

from typing import Annotated
from fastapi import Request, Depends

from itemtracker.services.catalog import ItemCatalog
from itemtracker.services.tracker import TrackerService


def get_tracker_service(request: Request) -> TrackerService:
    return request.app.state.tracker_service


def get_item_catalog(request: Request) -> ItemCatalog:
    return request.app.state.catalog


TrackerServiceDep = Annotated[TrackerService, Depends(get_tracker_service)]
ItemCatalogDep = Annotated[ItemCatalog, Depends(get_item_catalog)]
