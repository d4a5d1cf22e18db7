from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

T = TypeVar("T")


class SearchRequest(BaseModel):
    """Paging/search parameters shared by every list endpoint."""

    model_config = ConfigDict(frozen=True)

    search: Optional[str] = None
    page: int = Field(1, ge=1)
    page_size: int = Field(10, ge=1, le=100)
    sort_by: Optional[str] = None
    sort_descending: bool = False

    @field_validator("search", "sort_by")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Blank strings mean "no filter" and must key the same as None."""
        if v is not None and not v.strip():
            return None
        return v


class PagedResponse(BaseModel, Generic[T]):
    """Một trang kết quả."""

    items: List[T] = []
    total_count: int = 0
    page: int = 1
    page_size: int = 10
