from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from storefront.config import settings
from storefront.db import SessionLocal, engine
from storefront.repositories.settings_repo import SettingsRepository
from storefront.services.payment_service import PaymentIntentBridge

router = APIRouter()


@router.get("/health", tags=["health"])
def health():
    db_ok = False
    customcat_configured = False
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            db_ok = True
    except SQLAlchemyError:
        db_ok = False
    if db_ok:
        db = SessionLocal()
        try:
            customcat_configured = bool(
                SettingsRepository(db).get_value(settings.CUSTOMCAT_API_KEY_SETTING)
            )
        finally:
            db.close()
    bridge = PaymentIntentBridge()

    return {
        "status": "ok" if db_ok and bridge.adapter.health_check() else "degraded",
        "db": db_ok,
        "payment_mode": bridge.mode,
        "customcat_configured": customcat_configured,
    }
