"""Jira Cloud REST client used as the issue source."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import orjson
import requests

from jiranav.constants import (
    API_BASE,
    CHILD_LINK_FIELDS,
    DEFAULT_FIELDS,
    HTTP_TIMEOUT_SECONDS,
    MAX_RESULTS,
)
from jiranav.errors import AuthError, TransportError
from jiranav.models import ChildPage, SearchPage

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


def extract_error_message(response: requests.Response) -> str:
    """Pull a readable message out of a Jira error response."""
    try:
        data = orjson.loads(response.content)
    except orjson.JSONDecodeError:
        return response.text
    if isinstance(data, dict):
        messages = data.get("errorMessages")
        if isinstance(messages, list) and messages:
            return " / ".join(str(m) for m in messages)
        if isinstance(data.get("message"), str):
            return data["message"]
    return orjson.dumps(data).decode()


class JiraClient:
    """Thin wrapper over the Jira REST API v3 for one cloud site."""

    def __init__(
        self,
        cloud_id: str,
        token_provider: Callable[[], str],
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            cloud_id: Atlassian cloud id of the Jira site.
            token_provider: Returns a valid bearer token for each request.
            session: HTTP session to use (a new one by default).
        """
        self.base_url = f"{API_BASE}/ex/jira/{cloud_id}"
        self.token_provider = token_provider
        self.session = session or requests.Session()
        self._field_names: set[str] | None = None

    def _request(self, path: str, params: dict[str, Any] | None = None) -> Any:
        token = self.token_provider()
        url = f"{self.base_url}{path}"
        logger.debug("GET %s %s", url, params or "")
        try:
            response = self.session.get(
                url,
                params=params,
                headers={
                    "Authorization": f"Bearer {token}",
                    "Accept": "application/json",
                },
                timeout=HTTP_TIMEOUT_SECONDS,
            )
        except requests.RequestException as e:
            msg = f"Jira API request failed: {e}"
            raise TransportError(msg) from e

        if not response.ok:
            msg = (
                f"Jira API error ({response.status_code} {response.reason}): "
                f"{extract_error_message(response)}"
            )
            if response.status_code == 401:
                raise AuthError(msg, status=response.status_code)
            raise TransportError(msg, status=response.status_code)

        try:
            return orjson.loads(response.content)
        except orjson.JSONDecodeError as e:
            msg = f"Jira API returned invalid JSON: {e}"
            raise TransportError(msg, status=response.status_code) from e

    def search_issues(
        self,
        jql: str,
        start_at: int = 0,
        max_results: int = MAX_RESULTS,
    ) -> SearchPage:
        """Run a JQL search and return one page of results."""
        data = self._request(
            "/rest/api/3/search/jql",
            {
                "jql": jql,
                "startAt": start_at,
                "maxResults": max_results,
                "fields": DEFAULT_FIELDS,
            },
        )
        return SearchPage.from_api(data, start_at)

    def _ensure_field_names(self) -> set[str]:
        # Field metadata is fetched once per client and never revalidated.
        if self._field_names is None:
            fields = self._request("/rest/api/3/field")
            self._field_names = {f.get("name", "") for f in fields}
        return self._field_names

    def child_jql_clauses(self, issue_key: str) -> list[str]:
        """Predicates matching the children of *issue_key* on this site."""
        clauses = [f'parent = "{issue_key}"']
        field_names = self._ensure_field_names()
        clauses.extend(
            f'"{name}" = "{issue_key}"'
            for name in CHILD_LINK_FIELDS
            if name in field_names
        )
        return clauses

    def fetch_child_issues(self, issue_key: str) -> ChildPage | None:
        """Search the children of *issue_key*.

        Returns:
            The first page of children with the query used, or None when no
            child predicate applies.
        """
        clauses = self.child_jql_clauses(issue_key)
        if not clauses:
            return None
        jql = " OR ".join(f"({clause})" for clause in clauses)
        page = self.search_issues(jql, 0, MAX_RESULTS)
        return ChildPage(issues=page.issues, total=page.total, jql=jql)

    def get_current_user(self) -> dict[str, Any]:
        """Return the authenticated user's profile."""
        return self._request("/rest/api/3/myself")
