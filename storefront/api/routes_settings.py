from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storefront.api.deps import optional_admin, require_admin
from storefront.config import settings
from storefront.db import get_db
from storefront.repositories.settings_repo import SettingsRepository
from storefront.schemas.setting_schema import SettingIn, SettingOut

router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("", summary="List settings (sensitive ones for admins only)")
def list_settings(admin: bool = Depends(optional_admin), db: Session = Depends(get_db)):
    rows = SettingsRepository(db).list(include_sensitive=admin)
    return [SettingOut.model_validate(s).model_dump() for s in rows]


@router.get("/store/customcat-status", summary="Is the CustomCat API key configured")
def customcat_status(db: Session = Depends(get_db)):
    configured = bool(SettingsRepository(db).get_value(settings.CUSTOMCAT_API_KEY_SETTING))
    return {
        "configured": configured,
        "message": "CustomCat API is configured" if configured else "CustomCat API key not configured",
    }


@router.get("/{key}", summary="Get one setting")
def get_setting(key: str, admin: bool = Depends(optional_admin), db: Session = Depends(get_db)):
    s = SettingsRepository(db).get(key)
    if not s:
        raise HTTPException(status_code=404, detail=f"Setting with key '{key}' not found")
    if s.is_sensitive and not admin:
        raise HTTPException(status_code=403, detail="You don't have permission to access this setting")
    return SettingOut.model_validate(s).model_dump()


@router.post("", summary="Create or update a setting")
def upsert_setting(
    payload: SettingIn, _: bool = Depends(require_admin), db: Session = Depends(get_db)
):
    repo = SettingsRepository(db)
    s = repo.upsert(payload.key, payload.value, payload.description, payload.is_sensitive)
    db.commit()
    return SettingOut.model_validate(s).model_dump()


@router.delete("/{key}", summary="Delete a setting")
def delete_setting(key: str, _: bool = Depends(require_admin), db: Session = Depends(get_db)):
    repo = SettingsRepository(db)
    if not repo.delete(key):
        raise HTTPException(status_code=404, detail=f"Setting with key '{key}' not found")
    db.commit()
    return {"message": f"Setting '{key}' deleted successfully"}
