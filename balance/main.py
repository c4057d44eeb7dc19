"""FastAPI application entry point."""
from fastapi import FastAPI

from balance.logging_config import configure_logging
from balance.routers import analysis, health, history, session


configure_logging()

app = FastAPI(title="Balance Focus Analysis API")


@app.get("/health", tags=["system"])
async def health_check() -> dict[str, str]:
    """Simple health probe for liveness checks."""
    return {"status": "ok"}


# Include routers
app.include_router(health.router)
app.include_router(analysis.router)
app.include_router(history.router)
app.include_router(session.router)
