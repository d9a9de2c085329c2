"""
Run the AutoReel backend.

Usage:
    python -m autoreel                       # Serve on 127.0.0.1:8000
    python -m autoreel --port 8085
    python -m autoreel --start-scheduler     # Enable scheduled runs at boot
"""

import argparse
import sys


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="autoreel", description="AutoReel backend service")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind to")
    parser.add_argument("--port", type=int, default=8000, help="Port to listen on")
    parser.add_argument(
        "--start-scheduler",
        action="store_true",
        help="Install the cron trigger at startup",
    )
    args = parser.parse_args(argv)

    import uvicorn
    from .main import app

    if args.start_scheduler:
        app.state.scheduler_control.start()

    print(f"Starting AutoReel backend on {args.host}:{args.port}")
    uvicorn.run(app, host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
