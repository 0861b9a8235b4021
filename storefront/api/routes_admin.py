from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from storefront.api.deps import require_admin
from storefront.db import get_db
from storefront.services.catalog_sync import CatalogSyncService

router = APIRouter(prefix="/api/store/customcat", tags=["admin"])


def get_sync_service(db: Session = Depends(get_db)) -> CatalogSyncService:
    return CatalogSyncService(db)


@router.post("/sync-products", summary="Import the CustomCat catalog")
def sync_products(
    _: bool = Depends(require_admin), svc: CatalogSyncService = Depends(get_sync_service)
):
    outcome = svc.sync()
    if not outcome["success"]:
        return JSONResponse(status_code=502, content=outcome)
    return outcome


@router.get("/verify-connection", summary="Probe CustomCat without importing")
def verify_connection(
    _: bool = Depends(require_admin), svc: CatalogSyncService = Depends(get_sync_service)
):
    outcome = svc.verify_connection()
    if not outcome["success"]:
        return JSONResponse(status_code=502, content=outcome)
    return outcome
