"""Application entry point.

Usage:
    # Development with auto-reload
    uvicorn rbac_service.main:app --reload

    # Installed console script
    rbac-service
"""

import uvicorn

from rbac_service.core.config import get_settings
from rbac_service.factory import create_app


# Create the application instance
app = create_app()


def run() -> None:
    """Serve ``app`` with uvicorn using the configured host and port."""
    settings = get_settings()
    uvicorn.run(
        "rbac_service.main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.is_development,
        log_level=settings.logging.level.lower(),
    )


if __name__ == "__main__":
    run()
