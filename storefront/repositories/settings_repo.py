from typing import List, Optional

from sqlalchemy.orm import Session

from storefront.models.app_setting import AppSetting


class SettingsRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, key: str) -> Optional[AppSetting]:
        return self.db.query(AppSetting).filter(AppSetting.key == key).first()

    def get_value(self, key: str) -> str:
        s = self.get(key)
        return (s.value or "").strip() if s else ""

    def list(self, include_sensitive: bool = False) -> List[AppSetting]:
        query = self.db.query(AppSetting)
        if not include_sensitive:
            query = query.filter(AppSetting.is_sensitive == False)
        return query.order_by(AppSetting.key).all()

    def upsert(
        self,
        key: str,
        value: str,
        description: Optional[str] = None,
        is_sensitive: bool = False,
    ) -> AppSetting:
        s = self.get(key)
        if s:
            s.value = value
            s.description = description
            s.is_sensitive = is_sensitive
        else:
            s = AppSetting(
                key=key, value=value, description=description, is_sensitive=is_sensitive
            )
            self.db.add(s)
        self.db.flush()
        return s

    def delete(self, key: str) -> bool:
        s = self.get(key)
        if not s:
            return False
        self.db.delete(s)
        self.db.flush()
        return True
