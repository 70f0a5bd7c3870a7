# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Performance and preference storage.

This package provides:
- PerformanceStore / PreferenceStore: store contracts
- StorageError: raised by every store on backend failure
- InMemory*Store: process-local stores
- Sql*Store: SQLAlchemy stores (SQLite by default)

Usage:
    from src.infrastructure.storage import (
        SqlPerformanceStore,
        init_database,
        create_schema,
    )

    init_database(settings)
    create_schema()
    store = SqlPerformanceStore()
"""

from src.infrastructure.storage.base import (
    PerformanceStore,
    PreferenceStore,
    StorageError,
)
from src.infrastructure.storage.connection import (
    check_database_connection,
    close_database,
    create_database_engine,
    create_schema,
    create_session_factory,
    get_session,
    init_database,
)
from src.infrastructure.storage.memory import (
    InMemoryPerformanceStore,
    InMemoryPreferenceStore,
)
from src.infrastructure.storage.sql import SqlPerformanceStore, SqlPreferenceStore

__all__ = [
    # Contracts
    "PerformanceStore",
    "PreferenceStore",
    "StorageError",
    # In-memory
    "InMemoryPerformanceStore",
    "InMemoryPreferenceStore",
    # SQL
    "SqlPerformanceStore",
    "SqlPreferenceStore",
    "init_database",
    "close_database",
    "create_database_engine",
    "create_session_factory",
    "create_schema",
    "get_session",
    "check_database_connection",
]
