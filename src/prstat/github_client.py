"""GitHub GraphQL client for merged pull-request retrieval."""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Any, Dict, List, Optional

import requests

from .config import Config
from .errors import ApiError
from .models import PullRequest
from .windows import format_timestamp, parse_timestamp

logger = logging.getLogger(__name__)

SEARCH_MERGED_PULL_REQUESTS_QUERY = """
query SearchMergedPullRequests($query: String!, $first: Int!, $cursor: String) {
  search(query: $query, type: ISSUE, first: $first, after: $cursor) {
    issueCount
    pageInfo {
      hasNextPage
      endCursor
    }
    nodes {
      ... on PullRequest {
        title
        url
        author {
          login
        }
        createdAt
        mergedAt
        additions
        deletions
        commits(first: 1) {
          nodes {
            commit {
              authoredDate
            }
          }
        }
        reviews(first: 1) {
          nodes {
            createdAt
          }
        }
      }
    }
  }
}
"""


class GitHubClient:
    """Small, typed client for the GitHub GraphQL search API."""

    _PAGE_SIZE = 100
    _MAX_RETRIES = 5
    _MAX_BACKOFF_SECONDS = 30

    def __init__(self, config: Config, timeout_seconds: int = 30) -> None:
        """Initialize an authenticated GitHub API client.

        Args:
            config: Validated runtime configuration including token and endpoint.
            timeout_seconds: Per-request timeout in seconds.
        """
        self._config = config
        self._timeout_seconds = timeout_seconds
        self._endpoint = config.endpoint

        self._session = requests.Session()
        self._session.headers.update(
            {
                "Accept": "application/json",
                "Authorization": f"Bearer {config.token}",
            }
        )

    def _extract_backoff_seconds(self, response: requests.Response, attempt: int) -> int:
        """Compute exponential backoff seconds, honoring Retry-After when available."""
        retry_after_header = response.headers.get("Retry-After")
        if retry_after_header:
            try:
                retry_after_seconds = int(retry_after_header)
                return min(self._MAX_BACKOFF_SECONDS, max(1, retry_after_seconds))
            except ValueError:
                pass

        return min(self._MAX_BACKOFF_SECONDS, 2 ** (attempt - 1))

    def _post_graphql(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        """Execute a GraphQL POST with retry logic for 429/5xx responses.

        Returns:
            The ``data`` member of the GraphQL response.

        Raises:
            ApiError: If the request repeatedly fails, returns HTTP >= 400,
                returns GraphQL errors, or does not return valid JSON.
        """
        body = {"query": query, "variables": variables}
        last_error: Optional[Exception] = None

        for attempt in range(1, self._MAX_RETRIES + 1):
            try:
                response = self._session.post(self._endpoint, json=body, timeout=self._timeout_seconds)
            except requests.RequestException as exc:
                last_error = exc
                if attempt == self._MAX_RETRIES:
                    raise ApiError(f"GitHub request failed after retries: POST {self._endpoint}") from exc
                logger.warning(
                    "GitHub request failed, retrying",
                    extra={"attempt": attempt, "error": str(exc)},
                )
                time.sleep(min(self._MAX_BACKOFF_SECONDS, 2 ** (attempt - 1)))
                continue

            status_code = response.status_code
            is_retryable = status_code == 429 or 500 <= status_code <= 599

            if is_retryable and attempt < self._MAX_RETRIES:
                backoff_seconds = self._extract_backoff_seconds(response, attempt)
                logger.warning(
                    "GitHub returned a retryable status",
                    extra={"attempt": attempt, "status_code": status_code, "backoff_seconds": backoff_seconds},
                )
                time.sleep(backoff_seconds)
                continue

            if status_code >= 400:
                raise ApiError(
                    "GitHub API request failed: "
                    f"POST {self._endpoint} returned {status_code} - {response.text}"
                )

            try:
                payload = response.json()
            except ValueError as exc:
                raise ApiError(f"GitHub API returned invalid JSON: POST {self._endpoint}") from exc

            if not isinstance(payload, dict):
                raise ApiError(f"GitHub API returned unexpected payload shape: POST {self._endpoint}")

            if payload.get("errors"):
                raise ApiError(f"GitHub GraphQL query failed: {payload['errors']}")

            data = payload.get("data")
            if not isinstance(data, dict):
                raise ApiError(f"GitHub API response is missing 'data': POST {self._endpoint}")

            return data

        raise ApiError(f"GitHub request failed after retries: POST {self._endpoint}") from last_error

    def _parse_datetime(self, value: Optional[str]) -> Optional[datetime]:
        try:
            return parse_timestamp(value)
        except ValueError as exc:
            raise ApiError(f"GitHub returned an invalid timestamp: {value!r}") from exc

    def _build_pull_request(self, node: Dict[str, Any]) -> PullRequest:
        """Map a GraphQL ``PullRequest`` node to a :class:`PullRequest`.

        Raises:
            ApiError: If required fields are missing from the node.
        """
        author = node.get("author") or {}
        commits = (node.get("commits") or {}).get("nodes") or []
        reviews = (node.get("reviews") or {}).get("nodes") or []

        created_at = self._parse_datetime(node.get("createdAt"))
        merged_at = self._parse_datetime(node.get("mergedAt"))
        authored_date = None
        if commits:
            authored_date = self._parse_datetime(((commits[0] or {}).get("commit") or {}).get("authoredDate"))
        first_reviewed_at = None
        if reviews:
            first_reviewed_at = self._parse_datetime((reviews[0] or {}).get("createdAt"))

        url = node.get("url")
        additions = node.get("additions")
        deletions = node.get("deletions")

        if not url or created_at is None or merged_at is None or authored_date is None:
            raise ApiError(f"GitHub pull request payload is missing required fields: payload={node}")
        if not isinstance(additions, int) or not isinstance(deletions, int):
            raise ApiError(f"GitHub pull request payload has invalid line counts: payload={node}")

        return PullRequest(
            title=str(node.get("title") or ""),
            # Deleted accounts come back with a null author.
            author=str(author.get("login") or "ghost"),
            url=str(url),
            createdAt=created_at,
            mergedAt=merged_at,
            additions=additions,
            deletions=deletions,
            authoredDate=authored_date,
            firstReviewedAt=first_reviewed_at,
        )

    def build_search_query(self, query: str, start: datetime, end: datetime) -> str:
        """Build the search string selecting pull requests merged in ``[start, end)``."""
        return f"{query} is:pr is:merged merged:{format_timestamp(start)}..{format_timestamp(end)}"

    def fetch_all_merged_pull_requests(self, query: str, start: datetime, end: datetime) -> List[PullRequest]:
        """Fetch every pull request matching ``query`` merged within the window.

        Follows cursor pagination until ``pageInfo.hasNextPage`` is false.
        """
        search_query = self.build_search_query(query, start, end)
        pull_requests: List[PullRequest] = []
        cursor: Optional[str] = None

        while True:
            data = self._post_graphql(
                SEARCH_MERGED_PULL_REQUESTS_QUERY,
                {"query": search_query, "first": self._PAGE_SIZE, "cursor": cursor},
            )
            search = data.get("search") or {}

            for node in search.get("nodes") or []:
                # Non pull-request search hits come back as empty objects.
                if not node:
                    continue
                pull_requests.append(self._build_pull_request(node))

            page_info = search.get("pageInfo") or {}
            if not page_info.get("hasNextPage"):
                break
            cursor = page_info.get("endCursor")

        logger.info(
            "Fetched merged pull requests",
            extra={"search_query": search_query, "pull_requests": len(pull_requests)},
        )
        return pull_requests
