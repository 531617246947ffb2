"""
Database repository layer using SQLModel.

This package contains all repository classes organized by business domain
and table relationships. Each module provides type-safe async data access
operations for its corresponding SQLModel entity models.

All repositories are built on SQLModel for:
- Type-safe ORM operations with Pydantic validation
- Async-first database access patterns
- Consistent CRUD interface via BaseRepository
- Query building utilities for filtering and pagination

Modules:
- base: BaseRepository interface, CrudRepository and QueryBuilder utilities
- crack_analyses: Crack analysis and PDF export operations
- credits: Credit balance and ledger operations
- conversations: Conversation and message operations
- cracks: Crack record operations
- products: Product catalog and recommendation operations
- professionals: City, zip code, professional and search log operations
- crack_cause_templates: Crack cause template operations
"""

from . import (
    crack_analyses,
    crack_cause_templates,
    conversations,
    cracks,
    credits,
    products,
    professionals,
)

__all__ = [
    "crack_analyses",
    "crack_cause_templates",
    "conversations",
    "cracks",
    "credits",
    "products",
    "professionals",
]
