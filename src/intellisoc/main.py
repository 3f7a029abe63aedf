"""Main entry point for IntelliSOC."""

from intellisoc.common.config import get_config
from intellisoc.common.logging import get_logger

logger = get_logger(__name__)

ENDPOINTS = (
    "POST   /api/auth/login",
    "POST   /api/log/event",
    "POST   /api/log/batch",
    "GET    /api/ip/info",
    "GET    /api/analytics/login-stats",
    "GET    /api/analytics/ip-reputation/{address}",
    "GET    /api/export/all-logs",
    "GET    /health",
)


def main():
    """Start the API server."""
    import uvicorn

    config = get_config()
    logger.info(f"IntelliSOC starting in {config.environment.value} mode")
    logger.info(f"Storage: JSON files in {config.data_dir.resolve()}")
    for endpoint in ENDPOINTS:
        logger.info(f"  {endpoint}")

    uvicorn.run(
        "intellisoc.api.gateway:app",
        host=config.api_host,
        port=config.api_port,
        reload=config.debug,
        log_level=config.log_level.value.lower(),
    )


if __name__ == "__main__":
    main()
