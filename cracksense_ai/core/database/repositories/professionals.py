"""
Professional directory repository implementation.

This module provides data access operations for US cities and zip codes,
professional listings and the professional search log.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.professionals import CityZipCode, Professional, ProfessionalSearchLog, UsCity
from .base import CrudRepository


class UsCityRepository(CrudRepository[UsCity]):
    """Repository for US cities and their zip codes."""

    order_by = "city_name"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, UsCity)

    async def get_by_zip_code(self, zip_code: str) -> Optional[UsCity]:
        """Get the city a five-digit zip code belongs to."""
        stmt = (
            select(UsCity)
            .join(CityZipCode, CityZipCode.city_id == UsCity.id)  # type: ignore
            .where(CityZipCode.zip_code == zip_code)
        )
        return await self._first(stmt)

    async def get_by_name_and_state(self, city_name: str, state_code: str) -> Optional[UsCity]:
        """Get a city by case-insensitive name and state code."""
        stmt = select(UsCity).where(
            func.lower(UsCity.city_name) == city_name.lower(),
            UsCity.state_code == state_code.upper(),
        )
        return await self._first(stmt)

    async def list_with_coordinates(self) -> List[UsCity]:
        """Get every city that has a latitude and longitude."""
        stmt = select(UsCity).where(UsCity.latitude.is_not(None), UsCity.longitude.is_not(None))  # type: ignore
        return await self._all(stmt)

    async def get_zip_codes(self, city_id: int) -> List[str]:
        """Get the zip codes of a city in ascending order."""
        stmt = select(CityZipCode).where(CityZipCode.city_id == city_id).order_by(CityZipCode.zip_code.asc())  # type: ignore
        result = await self.session.execute(stmt)
        return [row.zip_code for row in result.scalars().all()]

    async def add_zip_code(self, city_id: int, zip_code: str) -> CityZipCode:
        """Attach a zip code to a city."""
        row = CityZipCode(city_id=city_id, zip_code=zip_code)
        self.session.add(row)
        await self.session.commit()
        await self.session.refresh(row)
        return row


class ProfessionalRepository(CrudRepository[Professional]):
    """Repository for professional listings."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Professional)

    async def list_active_in_city(self, city_id: int, limit: int = 20) -> List[Professional]:
        """Get active professionals whose primary city is ``city_id``.

        Ordered by top-pro status, then rating, then hire count.
        """
        stmt = (
            select(Professional)
            .where(Professional.primary_city_id == city_id, Professional.is_active == True)  # noqa: E712
            .order_by(
                Professional.is_top_pro.desc(),  # type: ignore
                Professional.rating.desc(),  # type: ignore
                Professional.hire_count.desc(),  # type: ignore
            )
            .limit(limit)
        )
        return await self._all(stmt)

    async def get_active(self, professional_id: int) -> Optional[Professional]:
        """Get a professional only when the listing is active."""
        stmt = select(Professional).where(Professional.id == professional_id, Professional.is_active == True)  # noqa: E712
        return await self._first(stmt)


class ProfessionalSearchLogRepository(CrudRepository[ProfessionalSearchLog]):
    """Repository for the professional search log."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ProfessionalSearchLog)
