"""
Teapot API — Configuration
Every setting can be overridden from the environment.
"""

import os

__all__ = [
    "HOST",
    "PORT",
    "LOG_LEVEL",
    "API_PREFIX",
    "API_VERSION",
    "DEFAULT_PAGE_LIMIT",
    "MAX_PAGE_LIMIT",
]

HOST = os.getenv("TEAPOT_HOST", "127.0.0.1")
PORT = int(os.getenv("TEAPOT_PORT", "8000"))
LOG_LEVEL = os.getenv("TEAPOT_LOG_LEVEL", "INFO").upper()

# "" serves /teapots, "/api" serves /api/teapots
API_PREFIX = os.getenv("TEAPOT_API_PREFIX", "").rstrip("/")

API_VERSION = "1.0.0"

DEFAULT_PAGE_LIMIT = 20
MAX_PAGE_LIMIT = 100
