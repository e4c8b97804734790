"""
Launcher for the ChildCare Q&A page host (api.server:app).
"""

import argparse
import os
import socket
from contextlib import closing
from pathlib import Path

import uvicorn
from dotenv import load_dotenv, find_dotenv

from childcare_qa.logging import configure_logging

# Load environment variables early
load_dotenv(find_dotenv())


def _port_available(host: str, port: int) -> bool:
    """Return True if we can bind to the given host:port."""
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        try:
            s.bind((host, port))
            return True
        except OSError:
            return False


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the ChildCare Q&A page host")
    parser.add_argument("--host", default=os.getenv("HOST", "127.0.0.1"))
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "8000")))
    parser.add_argument("--log-level", default=os.getenv("LOG_LEVEL", "info"))
    parser.add_argument(
        "--reload",
        action="store_true",
        default=os.getenv("RELOAD", "0").strip().lower() not in {"0", "false", "no"},
        help="Enable auto-reload (dev only)",
    )
    args = parser.parse_args()
    configure_logging(args.log_level)

    host = args.host
    port = args.port
    if not _port_available(host, port):
        print(f"[run_api] Port {port} is busy; selecting an ephemeral port.")
        port = 0

    uvicorn_kwargs = dict(
        host=host,
        port=port,
        reload=args.reload,
        log_level=args.log_level.lower(),
        proxy_headers=True,
        forwarded_allow_ips="*",
    )
    if args.reload:
        base = Path(__file__).parent
        uvicorn_kwargs.update(
            {
                "reload_dirs": [str(base / "childcare_qa"), str(base / "api")],
                "reload_excludes": [".venv/*", "venv/*", "**/__pycache__/*", "**/*.pyc", ".git/*"],
            }
        )
    # uvicorn needs an import string when reload is on
    uvicorn.run("api.server:app", **uvicorn_kwargs)


if __name__ == "__main__":
    main()
