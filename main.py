"""
Main entrypoint: FastAPI server for OmniPass analysis and coaching.

Env: OMNIPASS_NETWORK, ALCHEMY_API_KEY, GEMINI_API_KEY, COINGECKO_API_KEY,
API_HOST, API_PORT, LOG_LEVEL (see backend_omnipass.config).

Equivalent: uvicorn backend_omnipass.api_server.app:app --host 0.0.0.0 --port 3001
"""

import os

# Configure structured JSON logging before other imports that may log
from backend_omnipass.omnipass_logging import get_logger

logger = get_logger("main")


def main() -> None:
    from backend_omnipass.config import get_settings

    settings = get_settings()
    if not settings.alchemy_api_key:
        logger.warning("main_alchemy_key_missing", message="Balances will use deterministic demo data")
    if not settings.gemini_api_key:
        logger.warning("main_gemini_key_missing", message="AI insights will use templated fallback")

    from backend_omnipass.api_server.app import create_app
    import uvicorn

    app = create_app(settings)
    logger.info("main_server_starting", host=settings.api_host, port=settings.api_port, network=settings.network)
    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


if __name__ == "__main__":
    main()
