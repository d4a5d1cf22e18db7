from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class CacheProbe(BaseModel):
    """Kết quả kiểm tra set/get/exists trên cache backend."""

    test_key: str
    stored_value: str
    retrieved_value: Optional[str] = None
    key_exists: bool = False


class CacheStatsResponse(BaseModel):
    enabled: bool
    backend: str
    probe: CacheProbe
    manager: Dict[str, Any] = Field(default_factory=dict)
    message: str


class CacheClearResponse(BaseModel):
    pattern: Optional[str] = None
    tag: Optional[str] = None
    removed: int = 0
    message: str
