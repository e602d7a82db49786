"""
Runtime configuration for the Hackathon Scout backend.

All settings are read from environment variables.  Values that are
cheap and safe to read (model name, endpoints, limits) are resolved at
import time; the OpenAI API key is resolved lazily so that the package
can be imported, and the server started, without credentials present.

Variables:

* ``OPENAI_API_KEY`` or ``OPENAI_API_KEYS`` – credentials for the model
  provider.  The latter may contain a comma‑separated list of keys, in
  which case the first non‑empty key is used.
* ``SCOUT_MODEL`` – chat model used for the analysis (default ``gpt-5``).
* ``SCOUT_MAX_STEPS`` – maximum number of model steps per request.
* ``ARXIV_API_URL`` – ArXiv query endpoint.
* ``ARXIV_TIMEOUT`` – timeout in seconds for the ArXiv request.
* ``SCOUT_HOST`` and ``SCOUT_PORT`` – bind address of the API server
  (default ``0.0.0.0:8001``).
* ``SCOUT_UI_PORT`` – port of the Streamlit UI (default ``8000``).
* ``SCOUT_API_URL`` – base URL of the backend, used by the Streamlit UI.
  Defaults to ``http://localhost:$SCOUT_PORT``.
* ``LOG_LEVEL`` – logging level for the CLI entry point.
"""

from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid integer for {name}: {raw!r}")
        return default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid number for {name}: {raw!r}")
        return default


MODEL_NAME: str = os.getenv('SCOUT_MODEL', 'gpt-5')
MAX_STEPS: int = _int_env('SCOUT_MAX_STEPS', 3)
DEFAULT_MAX_RESULTS: int = 5
ARXIV_API_URL: str = os.getenv('ARXIV_API_URL', 'http://export.arxiv.org/api/query')
ARXIV_TIMEOUT: float = _float_env('ARXIV_TIMEOUT', 30.0)
SERVER_HOST: str = os.getenv('SCOUT_HOST', '0.0.0.0')
SERVER_PORT: int = _int_env('SCOUT_PORT', 8001)
UI_PORT: int = _int_env('SCOUT_UI_PORT', 8000)
API_URL: str = os.getenv('SCOUT_API_URL', f'http://localhost:{SERVER_PORT}')
LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'INFO').upper()


def resolve_api_key() -> str:
    """Resolve a single OpenAI API key from environment variables."""
    single = os.getenv('OPENAI_API_KEY')
    if single:
        return single
    multiple = os.getenv('OPENAI_API_KEYS')
    if multiple:
        for key in (k.strip() for k in multiple.split(',') if k.strip()):
            return key
    raise EnvironmentError(
        'Missing OpenAI API key. Set OPENAI_API_KEY or OPENAI_API_KEYS in your environment.'
    )
