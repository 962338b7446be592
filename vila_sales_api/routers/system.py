# vila_sales_api/routers/system.py
from fastapi import APIRouter, Depends

from vila_sales_api.core.config import Settings, current_settings
from vila_sales_api.schemas import Health

router = APIRouter()


@router.get("/health", tags=["System"], summary="Health check", response_model=Health,
            responses={200: {"description": "Service available"}})
def health(settings: Settings = Depends(current_settings)):
    return {"ok": True, "service": settings.SERVICE_NAME}
