#!/usr/bin/env python3
"""Development server runner for Warfront."""

import argparse

import uvicorn


def main():
    parser = argparse.ArgumentParser(description="Run the Warfront game server")
    parser.add_argument("--host", default="0.0.0.0", help="Interface to bind")
    parser.add_argument("--port", type=int, default=9000, help="Port to listen on")
    parser.add_argument(
        "--reload", action="store_true", help="Auto-reload on code changes"
    )
    args = parser.parse_args()

    uvicorn.run(
        "warfront.server.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="info",
    )


if __name__ == "__main__":
    main()
