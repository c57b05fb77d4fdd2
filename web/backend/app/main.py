"""FastAPI application for the marketplace moderation desk.

Provides REST API endpoints wrapping the marketdesk package for:
- Interest listing and conversation reads
- Moderator replies
- Account suspension and reinstatement
- Audit log queries
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from marketdesk import __version__
from web.backend.app.routers import interests, moderation, security

app = FastAPI(
    title="Marketdesk API",
    description=(
        "REST API for marketplace moderators: interest threads, replies, "
        "account moderation and the audit trail."
    ),
    version=__version__,
)

# ---------------------------------------------------------------------------
# CORS middleware (allow all origins for development)
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Include routers
# ---------------------------------------------------------------------------
app.include_router(interests.router)
app.include_router(moderation.router)
app.include_router(security.router)


@app.get("/health", tags=["meta"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
