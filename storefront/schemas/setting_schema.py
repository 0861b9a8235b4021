from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SettingIn(BaseModel):
    key: str = Field(..., min_length=1, max_length=100)
    value: str
    description: Optional[str] = None
    is_sensitive: bool = False


class SettingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    key: str
    value: str
    description: Optional[str] = None
    is_sensitive: bool
