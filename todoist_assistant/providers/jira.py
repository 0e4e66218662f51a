"""Jira Cloud REST API v3 provider."""

import logging
from typing import Any

import httpx

from todoist_assistant.errors import TransportError
from todoist_assistant.models import Issue
from todoist_assistant.providers.base import IssueSource
from todoist_assistant.settings import JiraInstance

SEARCH_PATH = "/rest/api/3/search/jql"
FIELDS = "key,summary,status,labels,components,priority"
PAGE_SIZE = 50

logger = logging.getLogger(__name__)


class JiraProvider(IssueSource):
    def __init__(self, instance: JiraInstance) -> None:
        self.site = instance.site.rstrip("/")
        token = instance.token.get_secret_value() if instance.token else ""
        self._auth = httpx.BasicAuth(instance.username, token)

    def _search_page(self, jql: str, page_token: str | None) -> dict:
        params = {"jql": jql, "maxResults": PAGE_SIZE, "fields": FIELDS}
        if page_token:
            params["nextPageToken"] = page_token
        try:
            response = httpx.get(
                f"{self.site}{SEARCH_PATH}",
                params=params,
                auth=self._auth,
                headers={"Accept": "application/json"},
                timeout=30,
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as exc:
            raise TransportError(f"Error from Jira API at {self.site}: {exc}") from exc
        except ValueError as exc:
            raise TransportError(f"Jira API at {self.site} returned an undecodable body") from exc

    def _issue_from_node(self, node: dict[str, Any]) -> Issue:
        fields = node.get("fields") or {}
        priority = fields.get("priority")
        try:
            return Issue(
                key=node["key"],
                summary=fields.get("summary") or "",
                status=(fields.get("status") or {}).get("name", ""),
                labels=fields.get("labels") or [],
                components=[c["name"] for c in fields.get("components") or []],
                priority=priority["name"] if priority else None,
            )
        except (KeyError, ValueError) as exc:
            raise TransportError(f"Unexpected issue payload from Jira API at {self.site}: {exc}") from exc

    def fetch_issues(self, jql: str) -> list[Issue]:
        issues: list[Issue] = []
        page_token = None
        while True:
            page = self._search_page(jql, page_token)
            nodes = page.get("issues") or []
            issues.extend(self._issue_from_node(n) for n in nodes)
            logger.debug(f"Fetched {len(issues)} issues from {self.site}")
            page_token = page.get("nextPageToken")
            if not nodes or not page_token or page.get("isLast"):
                break
        return issues
