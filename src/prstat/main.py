"""Entry point wiring configuration, record sources and the monthly report."""

from __future__ import annotations

import logging
import sys
import time
from datetime import datetime, timezone
from functools import partial
from typing import List, Optional, Sequence

from .cli import parse_args
from .config import Config, load_config
from .errors import (
    ApiError,
    AuthenticationError,
    ConfigurationError,
    InvalidInputError,
    ParseError,
)
from .github_client import GitHubClient
from .loader import filter_merged_between, load_pull_requests_from_log
from .models import PullRequest
from .report import FetchPullRequests, generate_report

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_UNEXPECTED = 1
EXIT_CONFIGURATION = 2
EXIT_AUTHENTICATION = 3
EXIT_API = 4
EXIT_INVALID_INPUT = 5


def configure_logging(verbose: bool = False) -> None:
    """Send log records to stderr so stdout carries only the report."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def build_fetcher(config: Config) -> FetchPullRequests:
    """Return the per-window record source selected by ``config``."""
    if config.query:
        client = GitHubClient(config=config)
        return partial(client.fetch_all_merged_pull_requests, config.query)

    pull_requests: List[PullRequest] = load_pull_requests_from_log(config.input_path)
    return partial(filter_merged_between, pull_requests)


def orchestrate_report_generation(argv: Optional[Sequence[str]] = None) -> int:
    """Run a full report and map failures to process exit codes."""
    try:
        args = parse_args(argv)
        configure_logging(args.verbose)

        config = load_config(
            start=args.start,
            end=args.end,
            query=args.query,
            input_path=args.input,
            window_delay_seconds=args.delay,
        )
        if config.end:
            logger.debug("End date is not used for windowing", extra={"end": config.end})

        fetch = build_fetcher(config)
        generate_report(
            fetch=fetch,
            start=config.start,
            now=datetime.now(timezone.utc),
            out=sys.stdout,
            sleep=time.sleep,
            delay_seconds=config.window_delay_seconds,
        )
        return EXIT_OK
    except ConfigurationError as exc:
        logger.error("Configuration error: %s", exc)
        return EXIT_CONFIGURATION
    except AuthenticationError as exc:
        logger.error("Authentication error: %s", exc)
        return EXIT_AUTHENTICATION
    except ApiError as exc:
        logger.error("GitHub API error: %s", exc)
        return EXIT_API
    except (InvalidInputError, ParseError) as exc:
        logger.error("Invalid input: %s", exc)
        return EXIT_INVALID_INPUT
    except Exception:
        logger.exception("Unexpected error while generating the report")
        return EXIT_UNEXPECTED


def main() -> None:
    """Console script entry point."""
    raise SystemExit(orchestrate_report_generation())


if __name__ == "__main__":
    main()
