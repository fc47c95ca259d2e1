# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Framework Integrations - FastAPI endpoints for SaveKeeper.
"""

from savekeeper.integrations.fastapi import (
    register_savekeeper_routes,
    savekeeper_lifespan,
    verify_api_key,
)

__all__ = [
    "register_savekeeper_routes",
    "savekeeper_lifespan",
    "verify_api_key",
]
