#!/usr/bin/env python3
"""Main entry point for the debate tournament engine."""

import logging
import os
import sys


def setup_logging(level: str = "INFO"):
    """Configure logging for the web server."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    # Suppress noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def print_usage():
    """Print usage information for local development."""
    print("Debate Tournament Engine")
    print("=" * 40)
    print("Start the API server:")
    print("   python main.py --web")
    print()
    print("Configuration is read from tournament_config.json (created on first run).")


def start_web_server():
    """Start the FastAPI web server."""
    from config.settings import get_default_config
    from web.api import create_app

    config = get_default_config()
    setup_logging(config.system.log_level)

    import uvicorn

    port = int(os.environ.get("PORT", config.system.port))

    print("Starting Debate Tournament Engine...")
    print(f"API Documentation: http://localhost:{port}/docs")

    uvicorn.run(
        create_app(), host=config.system.host, port=port, log_level="info", access_log=True
    )


def main():
    """Main entry point."""
    # Check for production environment (Railway, Docker, Heroku, etc.)
    is_production = any([
        "RAILWAY_ENVIRONMENT" in os.environ,
        "PORT" in os.environ,
        "DYNO" in os.environ,  # Heroku
        os.environ.get("ENVIRONMENT") == "production",
    ])

    if is_production or "--web" in sys.argv:
        start_web_server()
    else:
        print_usage()


if __name__ == "__main__":
    main()
