"""
Database entity models.

This package contains all database entity models organized by business domain
and table relationships. Each module represents either:

1. A single database table and its related logic
2. A business domain that spans multiple related tables

Modules:
- crack_analyses: Homeowner crack analyses and their PDF exports
- credits: Credit balances and the transaction ledger
- conversations: Chat conversations and messages
- cracks: User-maintained crack records
- products: Repair product catalog and recommendation tracking
- professionals: US cities, zip codes, professionals and search logs
- crack_cause_templates: Reference text per crack cause category
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
