"""
Uvicorn server runner with configurable logging.

Usage:
    python run.py [--debug] [--host HOST] [--port PORT]

Environment variables (set in .env file):
    DEBUG=true - Enable debug logging
    PORT=8000 - Set server port (default: 8000)
    HOST=127.0.0.1 - Set server host (default: 127.0.0.1)
    SLACK_SIGNING_SECRET, SLACK_CLIENT_ID, SLACK_CLIENT_SECRET, SESSION_KEY
"""

import argparse
import os

import uvicorn


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the SlackOverload server")
    parser.add_argument("--debug", action="store_true", help="Print debug statements")
    parser.add_argument("--host", default=os.getenv("HOST", "127.0.0.1"))
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "8000")))
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    return parser.parse_args(argv)


if __name__ == "__main__":
    args = parse_args()

    # The flag wins over .env; must be set before settings are first loaded
    if args.debug:
        os.environ["DEBUG"] = "true"

    from app.config import get_settings

    settings = get_settings()
    log_level = "debug" if settings.debug else "info"

    print(f"Starting {settings.app_name} server...")
    print(f"Host: {args.host}")
    print(f"Port: {args.port}")
    print(f"Log Level: {log_level}")
    print(f"Debug Mode: {settings.debug}")
    print(f"Storage: {settings.storage_backend} ({settings.data_dir})")

    uvicorn.run(
        "app.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=log_level,
        access_log=True,
    )
