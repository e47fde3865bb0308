"""
Profile record access.

Loads data/profile.json and reads fields by dotted JSON path. A value that
is missing, null, false or blank reads as "" so callers can treat all of
those as "not set".
"""

import json
import re
from pathlib import Path
from typing import Any

from pages_errors import MalformedInput, ProfileNotFound

EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
GITHUB_USERNAME_RE = re.compile(r"[a-zA-Z0-9]([a-zA-Z0-9-]*[a-zA-Z0-9])?")
DOMAIN_RE = re.compile(
    r"[a-zA-Z0-9]([a-zA-Z0-9-]*[a-zA-Z0-9])?"
    r"(\.[a-zA-Z0-9]([a-zA-Z0-9-]*[a-zA-Z0-9])?)*"
    r"\.[a-zA-Z]{2,}"
)
GITHUB_USERNAME_MAX = 39


def load_profile(path: Path) -> dict:
    """Parse the profile record, refusing anything but a JSON object."""
    path = Path(path)
    if not path.is_file():
        raise ProfileNotFound(f"Profile file not found: {path}")
    try:
        with open(path, encoding="utf-8") as f:
            record = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedInput(
            f"Invalid JSON format in {path}: {e}",
            ["Use a JSON validator to fix syntax errors: https://jsonlint.com/"],
        ) from e
    if not isinstance(record, dict):
        raise MalformedInput(f"Expected a JSON object at the top level of {path}")
    return record


def lookup(record: dict, path: str) -> Any:
    node = record
    for key in path.split("."):
        if not isinstance(node, dict) or key not in node:
            return None
        node = node[key]
    return node


def text_field(record: dict, path: str) -> str:
    value = lookup(record, path)
    if value is None or value is False:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def sequence(record: dict, key: str) -> list:
    value = lookup(record, key)
    return value if isinstance(value, list) else []


def is_valid_email(email: str) -> bool:
    return EMAIL_RE.fullmatch(email) is not None


def is_valid_github_username(username: str) -> bool:
    """Alphanumerics and single hyphens, no hyphen at either end."""
    return GITHUB_USERNAME_RE.fullmatch(username) is not None and "--" not in username


def is_valid_domain(domain: str) -> bool:
    return DOMAIN_RE.fullmatch(domain) is not None
