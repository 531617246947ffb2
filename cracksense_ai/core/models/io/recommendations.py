"""Product recommendation I/O models for API requests and responses."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from cracksense_ai.core.models.domain import RecommendationType
from cracksense_ai.services.product_recommendations import ProductMatch

from .base import ApiSchema


class RepairProductRead(BaseModel):
    """Schema for reading a catalog product."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    asin: str
    title: str
    url: str
    price: Optional[float] = None
    before_price: Optional[float] = None
    rating: Optional[float] = None
    image_url: Optional[str] = None
    product_type: Optional[str] = None
    material_type: Optional[str] = None
    skill_level: Optional[str] = None
    coverage_area: Optional[str] = None
    drying_time: Optional[str] = None


class ProductRecommendationRead(BaseModel):
    """A recommended product with its score and reason."""

    id: Optional[str] = Field(default=None, description="Stored recommendation id used for tracking")
    product: RepairProductRead
    recommendation_score: float
    recommendation_reason: str
    recommendation_type: RecommendationType

    @classmethod
    def from_match(cls, match: ProductMatch) -> "ProductRecommendationRead":
        return cls(
            id=match.recommendation_id,
            product=RepairProductRead.model_validate(match.product),
            recommendation_score=match.recommendation_score,
            recommendation_reason=match.recommendation_reason,
            recommendation_type=match.recommendation_type,
        )


class StoredRecommendationRead(BaseModel):
    """Schema for reading a stored recommendation and its interactions."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    analysis_id: Optional[str] = None
    conversation_id: Optional[str] = None
    product_id: str
    recommendation_score: float
    recommendation_reason: str
    recommendation_type: str
    user_query: Optional[str] = None
    viewed_at: Optional[datetime] = None
    clicked_at: Optional[datetime] = None
    purchased_at: Optional[datetime] = None
    created_at: datetime


class RecommendationRequest(ApiSchema):
    """Schema for requesting product recommendations."""

    recommendation_type: str = Field(
        default=RecommendationType.analysis_based.value,
        description="analysis_based, diy_focused or chat_based",
    )
    analysis_id: Optional[str] = Field(default=None, description="Required for analysis_based and diy_focused")
    conversation_id: Optional[str] = None
    user_query: Optional[str] = Field(default=None, description="Required for chat_based")
    crack_severity: Optional[str] = None
    crack_type: Optional[str] = None
    budget: Optional[float] = Field(default=None, description="Maximum product price")
    preferred_skill_level: Optional[str] = Field(default=None, description="beginner, intermediate or advanced")


class RecommendationResponse(ApiSchema):
    success: bool = True
    recommendations: List[ProductRecommendationRead]
    total: int


class StoredRecommendationsResponse(ApiSchema):
    success: bool = True
    recommendations: List[StoredRecommendationRead]


class TrackInteractionRequest(ApiSchema):
    """Schema for recording a view, click or purchase."""

    recommendation_id: Optional[str] = None
    interaction_type: Optional[str] = Field(default=None, description="view, click or purchase")
