"""
Product catalog entity models.

This module contains the repair product catalog and the recommendations
made from it, which are tracked through view, click and purchase events.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field

from ..base import Base, new_id, utc_now


class RepairProduct(Base, table=True):
    """Catalog entry for a purchasable repair product.

    Table: repair_products
    """

    __tablename__ = "repair_products"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    asin: str = Field(max_length=32, index=True)
    title: str = Field()
    url: str = Field()
    price: Optional[float] = Field(default=None)
    before_price: Optional[float] = Field(default=None)
    rating: Optional[float] = Field(default=None, index=True)
    image_url: Optional[str] = Field(default=None)

    # spackling_paste, patch_kit, caulk, mesh_tape, primer, paint, tools, other
    product_type: Optional[str] = Field(default=None, max_length=32)
    # acrylic, vinyl, plaster, mesh, fiberglass, compound, other
    material_type: Optional[str] = Field(default=None, max_length=32)
    suitable_for_severity: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    suitable_for_crack_types: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    search_keywords: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    skill_level: Optional[str] = Field(default=None, max_length=16)
    coverage_area: Optional[str] = Field(default=None)
    drying_time: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"RepairProduct(id={self.id}, asin={self.asin}, type={self.product_type})"


class ProductRecommendation(Base, table=True):
    """A product shown to a user, with interaction timestamps.

    Table: product_recommendations
    """

    __tablename__ = "product_recommendations"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    analysis_id: Optional[str] = Field(default=None, max_length=64, index=True)
    conversation_id: Optional[str] = Field(default=None, max_length=64)
    user_id: str = Field(max_length=128, index=True)
    product_id: str = Field(foreign_key="repair_products.id", max_length=64)
    recommendation_score: float = Field()
    recommendation_reason: str = Field()
    recommendation_type: str = Field(max_length=32)

    viewed_at: Optional[datetime] = Field(default=None)
    clicked_at: Optional[datetime] = Field(default=None)
    purchased_at: Optional[datetime] = Field(default=None)

    user_query: Optional[str] = Field(default=None)
    vector_similarity_score: Optional[float] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return (
            f"ProductRecommendation(id={self.id}, product_id={self.product_id}, "
            f"type={self.recommendation_type})"
        )
