"""Configuration parsing and validation for prstat."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .errors import AuthenticationError, ConfigurationError, UsageError
from .windows import parse_start

DEFAULT_GITHUB_ENDPOINT = "https://api.github.com/graphql"
DEFAULT_WINDOW_DELAY_SECONDS = 5.0


@dataclass(frozen=True)
class Config:
    """Validated runtime settings for a report run."""

    start: datetime
    end: Optional[str]
    query: Optional[str]
    input_path: Optional[str]
    window_delay_seconds: float = DEFAULT_WINDOW_DELAY_SECONDS
    token: str = ""
    endpoint: str = DEFAULT_GITHUB_ENDPOINT


def load_config(
    start: Optional[str],
    end: Optional[str],
    query: Optional[str],
    input_path: Optional[str],
    window_delay_seconds: float = DEFAULT_WINDOW_DELAY_SECONDS,
) -> Config:
    """Build and validate application configuration.

    Args:
        start: ISO8601 date the first monthly window starts at.
        end: ISO8601 end date; kept for reference, windows run until now.
        query: GitHub search query selecting the pull requests.
        input_path: Path to a local JSON pull-request log.
        window_delay_seconds: Pause between windows.

    Returns:
        A validated ``Config`` instance.

    Raises:
        UsageError: If not exactly one of ``query`` and ``input_path`` is set.
        InvalidInputError: If ``start`` is missing or not ISO8601.
        ConfigurationError: If ``window_delay_seconds`` is negative.
        AuthenticationError: If ``query`` is set but ``GITHUB_TOKEN`` is not.
    """
    if bool(query) == bool(input_path):
        raise UsageError("You must specify either --query or --input.")

    if window_delay_seconds < 0:
        raise ConfigurationError("Invalid value for 'delay': expected a number greater than or equal to 0.")

    parsed_start = parse_start(start)

    token = ""
    if query:
        token = os.getenv("GITHUB_TOKEN", "").strip()
        if not token:
            raise AuthenticationError(
                "Missing required GitHub token. "
                "Set the 'GITHUB_TOKEN' environment variable before running with --query."
            )

    return Config(
        start=parsed_start,
        end=end,
        query=query or None,
        input_path=input_path or None,
        window_delay_seconds=window_delay_seconds,
        token=token,
        endpoint=os.getenv("GITHUB_ENDPOINT", "").strip() or DEFAULT_GITHUB_ENDPOINT,
    )
