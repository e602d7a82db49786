"""
Command‑line launcher for Hackathon Scout.

Starts the API server, the Streamlit UI, or both::

    hackathon-scout [server|ui|both] [--host H] [--port P] [--ui-port U] [--api-url URL]

With ``both`` the server runs in a daemon thread and the UI is pointed
at that server, whatever ``SCOUT_API_URL`` says.  With ``ui`` alone the
UI talks to ``--api-url`` or ``SCOUT_API_URL``.  Defaults come from
:mod:`hackathon_scout.backend.config`.
"""

from __future__ import annotations

import argparse
import logging
import os
import subprocess
import sys
import threading
import time
from pathlib import Path
from typing import Dict, List, Optional

from hackathon_scout.backend import config

logger = logging.getLogger(__name__)

COMMANDS = ('server', 'ui', 'both')


def run_server(host: str, port: int) -> None:
    from hackathon_scout.backend import server
    server.run(host=host, port=port)


def ui_environment(api_url: str) -> Dict[str, str]:
    """Environment for the Streamlit process, with the backend URL set."""
    env = dict(os.environ)
    env['SCOUT_API_URL'] = api_url
    return env


def run_ui(port: int, api_url: str, host: str = config.SERVER_HOST) -> int:
    """Run the Streamlit UI in a subprocess and return its exit code."""
    app_path = Path(__file__).parent / "app.py"
    logger.info(f"Starting Streamlit UI on port {port} against {api_url}")
    # Streamlit gets its own process so it never shares an event loop with uvicorn
    completed = subprocess.run(
        [
            sys.executable, "-m", "streamlit", "run", str(app_path),
            "--server.port", str(port),
            "--server.address", host,
        ],
        env=ui_environment(api_url),
    )
    return completed.returncode


def run_both(host: str, port: int, ui_port: int) -> int:
    server_thread = threading.Thread(target=run_server, args=(host, port), daemon=True)
    server_thread.start()
    time.sleep(2)
    return run_ui(ui_port, f"http://localhost:{port}", host)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hackathon-scout",
        description="Run the Hackathon Scout API server, the Streamlit UI, or both.",
    )
    parser.add_argument("command", nargs="?", default="both", type=str.lower, choices=COMMANDS)
    parser.add_argument("--host", default=config.SERVER_HOST, help="Bind address of the server and the UI.")
    parser.add_argument("--port", type=int, default=config.SERVER_PORT, help="Port of the API server.")
    parser.add_argument("--ui-port", type=int, default=config.UI_PORT, help="Port of the Streamlit UI.")
    parser.add_argument(
        "--api-url",
        help="Backend URL used by the UI (ignored by 'both', which uses its own server).",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    args = build_parser().parse_args(argv)
    if args.command == "server":
        run_server(args.host, args.port)
    elif args.command == "ui":
        sys.exit(run_ui(args.ui_port, args.api_url or config.API_URL, args.host))
    else:
        sys.exit(run_both(args.host, args.port, args.ui_port))


if __name__ == "__main__":
    main()
