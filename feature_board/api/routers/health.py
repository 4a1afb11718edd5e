# feature_board/api/routers/health.py
from fastapi import APIRouter, Depends

from feature_board.api.dependencies import get_container
from feature_board.services.container import ServiceContainer

router = APIRouter(tags=["health"])


@router.get("/health")
def health_root(container: ServiceContainer = Depends(get_container)):
    return {"status": "ok", "primaryStore": container.store.primary_available()}
