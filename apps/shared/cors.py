"""Centralised CORS configuration for the portfolio services."""

import os
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware


# Local dev servers for the single-page frontend (Vite, CRA)
DEV_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:3000",
    "http://127.0.0.1:5173",
]


def get_allowed_origins() -> list[str]:
    """Allowed CORS origins for the current environment."""
    origins = []

    # FRONTEND_URL may hold several comma-separated origins
    for raw in os.getenv("FRONTEND_URL", "").split(","):
        clean_url = raw.strip().rstrip("/")
        if clean_url and clean_url not in origins:
            origins.append(clean_url)

    if os.getenv("ENVIRONMENT", "development") != "production":
        origins.extend(o for o in DEV_ORIGINS if o not in origins)

    return origins


def setup_cors(app: FastAPI) -> None:
    """Add CORS middleware to a FastAPI app."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_allowed_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
