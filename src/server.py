"""Uvicorn runner for the ShopFront gateway.

Usage:
    python src/server.py                  # Serve on 0.0.0.0:8000
    python src/server.py --port 9000      # Serve on another port
    python src/server.py --reload         # Restart on code changes
"""

import argparse

import uvicorn

from shared.logging import configure_logging


def main():
    parser = argparse.ArgumentParser(description="ShopFront API server")
    parser.add_argument("--host", default="0.0.0.0", help="Interface to bind (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=8000, help="Port to listen on (default: 8000)")
    parser.add_argument("--workers", type=int, default=1, help="Number of worker processes")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args()
    if args.workers > 1:
        # checkouts in progress live in process memory
        parser.error("--workers must be 1: checkout state is not shared between processes")

    configure_logging()

    uvicorn.run(
        "app:app",
        host=args.host,
        port=args.port,
        workers=None if args.reload else args.workers,
        reload=args.reload,
        log_config=None,
    )


if __name__ == "__main__":
    main()
