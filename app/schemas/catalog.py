from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, List, Literal, Optional

KitSortField = Literal["release_date", "name_ko", "price_krw", "view_count"]
Dir = Literal["asc", "desc"]
SuggestionType = Literal["edit", "new", "delete"]
ReviewStatus = Literal["approved", "rejected"]


def split_csv(raw: Optional[str]) -> List[str]:
    if raw is None:
        return []
    return [part.strip() for part in str(raw).split(",") if part.strip()]


class KitListParams(BaseModel):
    grades: List[str] = []
    scales: List[str] = []
    timelines: List[str] = []
    series: List[str] = []
    limited_types: List[str] = []
    price_min: Optional[int] = Field(None, ge=0)
    price_max: Optional[int] = Field(None, ge=0)
    pbandai_only: bool = False
    search: str = ""
    sort_by: KitSortField = "release_date"
    sort_order: Dir = "desc"
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1)

    @field_validator("grades", "timelines")
    @classmethod
    def _codes_upper(cls, values: List[str]) -> List[str]:
        return [value.strip().upper() for value in values if value.strip()]


class SuggestionCreate(BaseModel):
    kit_id: Optional[str] = None
    suggestion_type: SuggestionType
    current_data: Optional[Dict[str, Any]] = None
    suggested_data: Dict[str, Any] = {}
    reason: Optional[str] = Field(None, max_length=2000)


class SuggestionReview(BaseModel):
    status: ReviewStatus
    review_comment: Optional[str] = Field(None, max_length=2000)
