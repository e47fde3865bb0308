"""
Portfolio Pages Configuration
=============================
Shared settings and logging setup for validate_profile and deploy_pages.

Configuration via environment variables or .env file.
"""

import os
import sys
import logging
from pathlib import Path

from dotenv import load_dotenv

# Load .env file so GH_TOKEN and friends can live next to the site
load_dotenv()

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

PROFILE_JSON = Path(os.getenv("PROFILE_JSON", "data/profile.json"))
WORKFLOW_FILE = Path(os.getenv("PAGES_WORKFLOW_FILE", ".github/workflows/deploy-pages.yml"))
TOKEN_ENV_VAR = "GH_TOKEN"
GITHUB_API_URL = os.getenv("GITHUB_API_URL", "https://api.github.com").rstrip("/")
GITHUB_WEB_URL = "https://github.com"
GITHUB_API_TIMEOUT = int(os.getenv("GITHUB_API_TIMEOUT", "30"))
LOG_FILE = os.getenv("PAGES_LOG_FILE", "")

DEFAULT_BRANCH = "main"
REMOTE_NAME = "origin"
CNAME_FILE = "CNAME"

# GitHub Pages apex addresses, documented at docs.github.com
PAGES_A_RECORDS = (
    "185.199.108.153",
    "185.199.109.153",
    "185.199.110.153",
    "185.199.111.153",
)

PAT_URL = "https://github.com/settings/tokens/new"
PAT_SCOPES = ("repo", "workflow", "read:org")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

LOGGER_NAME = "portfolio_pages"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def _below_warning(record: logging.LogRecord) -> bool:
    return record.levelno < logging.WARNING


def _utf8_stream(stream):
    """Console stream re-opened as UTF-8 so the status glyphs survive Windows consoles."""
    try:
        fd = stream.fileno()
    except (AttributeError, OSError, ValueError):
        # in-memory streams (captured output) have no descriptor to re-open
        return stream
    return open(fd, mode="w", encoding="utf-8", closefd=False)


def setup_logging(log_file: str = LOG_FILE) -> logging.Logger:
    """Send progress to stdout, diagnostics to stderr, optionally mirror to a file."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.INFO)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    out = logging.StreamHandler(_utf8_stream(sys.stdout))
    out.addFilter(_below_warning)
    out.setFormatter(formatter)
    logger.addHandler(out)

    err = logging.StreamHandler(_utf8_stream(sys.stderr))
    err.setLevel(logging.WARNING)
    err.setFormatter(formatter)
    logger.addHandler(err)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
