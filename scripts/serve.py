"""Start the API server with host/port from settings."""
from __future__ import annotations

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import uvicorn

from balance.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "balance.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.debug,
        log_config=None,
    )


if __name__ == "__main__":
    main()
