"""Shared fixtures for the unit tests.

Every test gets its own in-memory SQLite database with all tables created.
"""

from __future__ import annotations

from typing import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel.pool import StaticPool

from cracksense_ai.core.database.utils import create_all
from test.settings import test_settings


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh in-memory database for one test."""
    engine = create_async_engine(
        test_settings.database.url,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_all(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def session(session_maker: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


@pytest.fixture
def user_id() -> str:
    return test_settings.user_id


@pytest.fixture
async def analysis(session: AsyncSession, user_id: str):
    """A stored low risk analysis owned by the test user."""
    from cracksense_ai.core.database.entities.crack_analyses import CrackAnalysis
    from cracksense_ai.core.database.repositories.crack_analyses import CrackAnalysisRepository

    return await CrackAnalysisRepository(session).create(
        CrackAnalysis(
            user_id=user_id,
            crack_type="Hairline vertical crack in drywall",
            crack_cause="1) VISUAL ASSESSMENT: Thin crack.\n2) RISK ASSESSMENT: Cosmetic only.",
            crack_width="0.5mm",
            crack_length="300mm",
            repair_steps=["Fill with spackle", "Sand and paint"],
            risk_level="low",
            image_urls=["https://mock-images.test/crack.jpg"],
            model_used="google/gemini-2.0-flash-001",
        )
    )


@pytest.fixture
async def products(session: AsyncSession):
    """A small repair product catalog."""
    from cracksense_ai.core.database.entities.products import RepairProduct

    catalog = [
        RepairProduct(
            asin="B000SPACK1",
            title="DAP Lightweight Spackling Paste",
            url="https://mock-store.test/spackle",
            price=6.5,
            rating=4.7,
            product_type="spackling_paste",
            material_type="acrylic",
            suitable_for_severity=["low", "moderate"],
            suitable_for_crack_types=["hairline", "drywall"],
            search_keywords=["spackle", "crack filler", "drywall"],
            skill_level="beginner",
        ),
        RepairProduct(
            asin="B000CAULK1",
            title="Elastomeric Crack Caulk",
            url="https://mock-store.test/caulk",
            price=12.0,
            rating=4.3,
            product_type="caulk",
            material_type="vinyl",
            suitable_for_severity=["low"],
            suitable_for_crack_types=["exterior"],
            search_keywords=["caulk", "sealant", "crack"],
            skill_level="beginner",
        ),
        RepairProduct(
            asin="B000EPOXY1",
            title="Concrete Epoxy Injection Kit",
            url="https://mock-store.test/epoxy",
            price=64.0,
            rating=4.1,
            product_type="patch_kit",
            material_type="compound",
            suitable_for_severity=["moderate", "high"],
            suitable_for_crack_types=["foundation"],
            search_keywords=["epoxy", "concrete", "crack"],
            skill_level="professional",
        ),
        RepairProduct(
            asin="B000TAPE01",
            title="Fiberglass Mesh Tape",
            url="https://mock-store.test/tape",
            price=None,
            rating=2.5,
            product_type="mesh_tape",
            material_type="fiberglass",
            suitable_for_severity=["low"],
            suitable_for_crack_types=["drywall"],
            search_keywords=["tape", "drywall"],
            skill_level=None,
        ),
    ]
    session.add_all(catalog)
    await session.commit()
    return catalog


@pytest.fixture
async def city(session: AsyncSession):
    """New York with zip code 10001 and two active professionals."""
    from cracksense_ai.core.database.entities.professionals import Professional, UsCity
    from cracksense_ai.core.database.repositories.professionals import UsCityRepository

    cities = UsCityRepository(session)
    new_york = await cities.create(
        UsCity(city_name="New York", state_code="NY", state_name="New York", latitude=40.7506, longitude=-73.9972)
    )
    await cities.add_zip_code(new_york.id, "10001")
    session.add_all(
        [
            Professional(
                company_name="Empire Structural",
                rating=4.9,
                review_count=120,
                hire_count=300,
                is_top_pro=True,
                is_licensed=True,
                response_time_minutes=30,
                estimate_fee_amount=150,
                estimate_fee_waived_if_hired=True,
                phone="555-0100",
                primary_city_id=new_york.id,
            ),
            Professional(
                company_name="Hudson Engineering",
                rating=4.2,
                review_count=15,
                hire_count=40,
                primary_city_id=new_york.id,
            ),
            Professional(
                company_name="Closed Shop",
                rating=5.0,
                primary_city_id=new_york.id,
                is_active=False,
            ),
        ]
    )
    await session.commit()
    return new_york
