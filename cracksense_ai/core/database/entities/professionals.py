"""
Professional directory entity models.

This module contains the US city and zip code lookup tables, the structural
engineer listings attached to a primary city, and the log of searches run
against them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field

from ..base import Base, utc_now


class UsCity(Base, table=True):
    """A US city with its coordinates.

    Table: us_cities
    """

    __tablename__ = "us_cities"

    id: Optional[int] = Field(default=None, primary_key=True)
    city_name: str = Field(max_length=128, index=True)
    state_code: str = Field(max_length=64, index=True)
    state_name: str = Field(max_length=64)
    county_name: Optional[str] = Field(default=None, max_length=128)
    latitude: Optional[float] = Field(default=None)
    longitude: Optional[float] = Field(default=None)
    population: Optional[int] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"UsCity(id={self.id}, city_name={self.city_name}, state_code={self.state_code})"


class CityZipCode(Base, table=True):
    """A five-digit zip code belonging to a city.

    Table: city_zip_codes
    """

    __tablename__ = "city_zip_codes"

    id: Optional[int] = Field(default=None, primary_key=True)
    zip_code: str = Field(max_length=5, unique=True, index=True)
    city_id: int = Field(foreign_key="us_cities.id", index=True)

    def __repr__(self) -> str:
        return f"CityZipCode(zip_code={self.zip_code}, city_id={self.city_id})"


class Professional(Base, table=True):
    """A structural engineering professional or company.

    Table: professionals
    """

    __tablename__ = "professionals"

    id: Optional[int] = Field(default=None, primary_key=True)
    company_name: str = Field(max_length=255)
    rating: float = Field(default=0.0)
    review_count: int = Field(default=0)
    hire_count: int = Field(default=0)
    is_top_pro: bool = Field(default=False)
    is_licensed: bool = Field(default=False)
    response_time_minutes: Optional[int] = Field(default=None)
    estimate_fee_amount: Optional[float] = Field(default=None)
    estimate_fee_waived_if_hired: bool = Field(default=False)
    description: Optional[str] = Field(default=None)
    phone: Optional[str] = Field(default=None, max_length=32)
    email: Optional[str] = Field(default=None, max_length=255)
    website_url: Optional[str] = Field(default=None)
    thumbtack_url: Optional[str] = Field(default=None)
    primary_city_id: Optional[int] = Field(default=None, foreign_key="us_cities.id", index=True)
    is_active: bool = Field(default=True, index=True)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"Professional(id={self.id}, company_name={self.company_name}, rating={self.rating})"


class ProfessionalSearchLog(Base, table=True):
    """One professional search, kept for analytics.

    Table: professional_search_logs
    """

    __tablename__ = "professional_search_logs"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: Optional[str] = Field(default=None, max_length=128, index=True)
    search_query: str = Field(max_length=128)
    zip_code: Optional[str] = Field(default=None, max_length=10)
    city_id: Optional[int] = Field(default=None)
    results_count: int = Field(default=0)
    search_context: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"ProfessionalSearchLog(id={self.id}, zip_code={self.zip_code}, results={self.results_count})"
