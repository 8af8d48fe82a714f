from __future__ import annotations

import logging
from typing import Optional

import requests

from lens_profile.config import ProfileConfig
from lens_profile.lens import queries
from lens_profile.lens.errors import MalformedResponse, UpstreamError, UpstreamUnreachable

logger = logging.getLogger(__name__)


class LensClient:
    """Thin GraphQL client for the three operations the profile page needs.

    With `proxy_url` configured, each operation is posted to
    `<proxy_url>/<operation>` (the proxy attaches upstream headers);
    otherwise straight to `api_url`.
    """

    def __init__(self, config: ProfileConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()

    def _endpoint(self, operation: str) -> str:
        if self.config.proxy_url:
            return f"{self.config.proxy_url}/{operation}"
        return self.config.api_url

    def execute(self, operation: str, query: str, variables: dict) -> dict:
        """POST one GraphQL document and return its `data` object."""
        url = self._endpoint(operation)
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": self.config.user_agent,
        }
        try:
            r = self.session.post(
                url,
                json={"query": query, "variables": variables},
                headers=headers,
                timeout=self.config.timeout,
            )
        except requests.RequestException as e:
            logger.error("Lens %s request to %s failed: %s", operation, url, e)
            raise UpstreamUnreachable(f"could not reach {url}: {e}") from e

        try:
            payload = r.json()
        except ValueError:
            payload = None

        if not r.ok:
            detail = _error_detail(payload) or r.reason or "request failed"
            raise UpstreamError(f"HTTP {r.status_code} from {operation}: {detail}", status=r.status_code)

        if not isinstance(payload, dict):
            raise MalformedResponse(f"{operation} response is not a JSON object")

        errors = payload.get("errors")
        if errors:
            messages = [e.get("message", str(e)) if isinstance(e, dict) else str(e) for e in errors]
            logger.error("Lens API errors for %s: %s", operation, messages)
            raise UpstreamError(f"Lens API returned errors: {'; '.join(messages)}",
                                status=r.status_code, messages=messages)

        data = payload.get("data")
        if not isinstance(data, dict):
            raise MalformedResponse(f"{operation} response has no data")
        return data

    def fetch_account(self) -> dict:
        data = self.execute(
            "accounts",
            queries.ACCOUNT_QUERY,
            queries.account_variables(self.config.lens_name, self.config.namespace),
        )
        account = data.get("account")
        if not account:
            raise MalformedResponse(f"account not found: {self.config.handle}")
        return account

    def fetch_stats(self, address: str) -> dict:
        data = self.execute("stats", queries.STATS_QUERY, queries.stats_variables(address))
        stats = data.get("accountStats")
        if not isinstance(stats, dict):
            raise MalformedResponse("stats response has no accountStats")
        return stats

    def fetch_posts(self, address: Optional[str] = None) -> dict:
        """Return the whole `data` object; the feed normalizer digs out `posts.items`."""
        address = address or self.config.evm_address
        return self.execute("posts", queries.POSTS_QUERY, queries.posts_variables(address))


def _error_detail(payload) -> Optional[str]:
    # proxy errors look like {"error": ...}; raw GraphQL errors like {"errors": [{"message": ...}]}
    if not isinstance(payload, dict):
        return None
    if payload.get("error"):
        return str(payload["error"])
    errors = payload.get("errors")
    if errors and isinstance(errors[0], dict):
        return errors[0].get("message")
    return None
