# src/geopin/api/app.py
"""
FastAPI application wiring.

This file creates the `FastAPI` instance and configures CORS for the map frontend.
Store and query logic live in `geopin.store` and `geopin.query`; routes in `geopin.api.routes`.
"""

from __future__ import annotations

import os

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from geopin import __version__
from geopin.config.settings import get_settings
from geopin.core.logging import configure_logging

from .routes import router

configure_logging()

app = FastAPI(title="GeoPin API", version=__version__)

# Extra origins can be added without editing YAML:
# GEOPIN_CORS_ORIGINS="http://localhost:8080,http://127.0.0.1:8080"
cors_origins = list(get_settings().api.cors_origins)
cors_origins += [s.strip() for s in os.getenv("GEOPIN_CORS_ORIGINS", "").split(",") if s.strip()]
if cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(router)
