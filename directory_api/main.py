"""
Server entry point for Directory API.

``python -m directory_api.main`` and ``directory-api serve`` both end up in
``run()``.
"""

from typing import Optional

import uvicorn

from .api import app  # noqa: F401
from .config import get_settings


def run(host: Optional[str] = None, port: Optional[int] = None, reload: bool = False) -> None:
    """Serve the API with uvicorn, falling back to the configured address."""
    settings = get_settings()
    uvicorn.run(
        "directory_api.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run(reload=get_settings().debug)
