import logging
import os
import tempfile
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, List, Optional

from filelock import FileLock, Timeout
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.adapters.customcat_client import CustomCatClient
from storefront.config import settings
from storefront.errors import StorefrontError
from storefront.models.catalog_product import CUSTOMCAT_SOURCE
from storefront.repositories.product_repo import ProductRepository
from storefront.repositories.settings_repo import SettingsRepository
from storefront.services.customcat_products import MalformedRecord, format_customcat_product
from storefront.utils.transactions import savepoint

log = logging.getLogger(__name__)

# curated by admins; a re-sync must not reset it
PRESERVED_ON_UPDATE = ("is_featured",)


class CatalogSyncError(StorefrontError):
    pass


class SyncInProgress(CatalogSyncError):
    status_code = 409


@dataclass
class SyncResults:
    total: int = 0
    added: int = 0
    updated: int = 0
    skipped: int = 0
    errors: int = 0

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


class CatalogSyncService:
    def __init__(
        self,
        db: Session,
        client_factory: Optional[Callable[[str], Any]] = None,
        lock_dir: Optional[str] = None,
    ):
        self.db = db
        self.products = ProductRepository(db)
        self.settings_repo = SettingsRepository(db)
        self.client_factory = client_factory or CustomCatClient
        self.lock_dir = lock_dir or settings.SYNC_LOCK_DIR or os.path.join(
            tempfile.gettempdir(), "storefront_locks"
        )

    def api_key(self) -> str:
        return self.settings_repo.get_value(settings.CUSTOMCAT_API_KEY_SETTING)

    def _require_api_key(self) -> str:
        key = self.api_key()
        if not key:
            raise CatalogSyncError("CustomCat API key not configured", status_code=400)
        return key

    def _source_lock(self, source: str) -> FileLock:
        os.makedirs(self.lock_dir, exist_ok=True)
        return FileLock(os.path.join(self.lock_dir, f"catalog_sync_{source}.lock"))

    def verify_connection(self) -> Dict[str, Any]:
        """Run the endpoint probe without touching the catalog."""
        probe = self.client_factory(self._require_api_key()).fetch_products()
        if not probe.success:
            return {"success": False, "message": probe.message, "errors": probe.errors}
        return {
            "success": True,
            "message": "CustomCat API connection successful",
            "endpoint": probe.endpoint.name,
        }

    def sync(self) -> Dict[str, Any]:
        """
        Probe CustomCat and import what it returns.
        Only one sync per source runs at a time; a concurrent call gets SyncInProgress.
        """
        key = self._require_api_key()
        lock = self._source_lock(CUSTOMCAT_SOURCE)
        try:
            lock.acquire(timeout=0)
        except Timeout:
            raise SyncInProgress("Sync already in progress")
        try:
            probe = self.client_factory(key).fetch_products()
            if not probe.success:
                log.error("CustomCat sync failed on every endpoint: %s", probe.errors)
                return {"success": False, "message": probe.message, "errors": probe.errors}
            results = self.import_products(probe.products)
        finally:
            lock.release()
        log.info("CustomCat sync via %r: %s", probe.endpoint.name, results.as_dict())
        return {
            "success": True,
            "message": "Product synchronization complete",
            "endpoint": probe.endpoint.name,
            "results": results.as_dict(),
        }

    def import_products(self, records: List[Any]) -> SyncResults:
        """
        Upsert records keyed by external id. Malformed records are skipped,
        records that fail in the database are counted as errors; neither
        stops the batch.
        """
        results = SyncResults(total=len(records))
        for record in records:
            try:
                fields = format_customcat_product(record)
            except MalformedRecord as e:
                log.warning("Skipping CustomCat record: %s", e)
                results.skipped += 1
                continue
            try:
                with savepoint(self.db):
                    existing = self.products.get_by_external_id(
                        CUSTOMCAT_SOURCE, fields["external_id"]
                    )
                    if existing:
                        for name in PRESERVED_ON_UPDATE:
                            fields.pop(name, None)
                        self.products.update(existing, fields)
                    else:
                        self.products.create(fields)
            except SQLAlchemyError:
                log.exception("Failed to store CustomCat product %s", fields["external_id"])
                results.errors += 1
                continue
            if existing:
                results.updated += 1
            else:
                results.added += 1
        self.db.commit()
        return results
