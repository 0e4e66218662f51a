"""Todoist REST API v2 provider."""

import logging
from typing import Any

import httpx
from pydantic import BaseModel

from todoist_assistant.errors import TransportError
from todoist_assistant.models import Project, Task
from todoist_assistant.providers.base import TaskRepository
from todoist_assistant.ratelimit import RateLimiter
from todoist_assistant.settings import TodoistSettings

BASE_URL = "https://api.todoist.com/rest/v2"

logger = logging.getLogger(__name__)


class TodoistProvider(TaskRepository):
    def __init__(self, settings: TodoistSettings, limiter: RateLimiter | None = None) -> None:
        if not settings.token:
            raise RuntimeError("todoist token is required")
        self._headers = {
            "Authorization": f"Bearer {settings.token.get_secret_value()}",
            "Content-Type": "application/json",
        }
        # Shared across every call this provider makes, for the life of the process.
        self._limiter = limiter or RateLimiter()

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        self._limiter.acquire()
        try:
            response = httpx.request(method, f"{BASE_URL}/{path}", headers=self._headers, timeout=30, **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise TransportError(f"Todoist API {method} /{path} failed: {exc}") from exc
        return response

    def _get(self, path: str, params: dict | None = None) -> Any:
        response = self._request("GET", path, params=params or {})
        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(f"Todoist API GET /{path} returned an undecodable body") from exc

    def _post(self, path: str, body: dict | None = None) -> httpx.Response:
        return self._request("POST", path, json=body)

    @staticmethod
    def _parse(model: type[BaseModel], data: Any, path: str) -> Any:
        try:
            return model.model_validate(data)
        except ValueError as exc:
            raise TransportError(f"Unexpected payload from Todoist API /{path}: {exc}") from exc

    def list_projects(self) -> list[Project]:
        return [self._parse(Project, node, "projects") for node in self._get("projects")]

    def list_all_tasks(self) -> list[Task]:
        return [self._parse(Task, node, "tasks") for node in self._get("tasks")]

    def list_tasks_for_project(self, project_id: str) -> list[Task]:
        nodes = self._get("tasks", params={"project_id": project_id})
        return [self._parse(Task, node, "tasks") for node in nodes]

    def create_task(self, content: str, project_id: str | None = None) -> Task:
        body: dict = {"content": content}
        if project_id:
            body["project_id"] = project_id
        response = self._post("tasks", body)
        try:
            node = response.json()
        except ValueError as exc:
            raise TransportError("Todoist API POST /tasks returned an undecodable body") from exc
        return self._parse(Task, node, "tasks")

    def complete_task(self, task_id: str) -> None:
        self._post(f"tasks/{task_id}/close")

    def get_task_labels(self, task_id: str) -> list[str]:
        task = self._parse(Task, self._get(f"tasks/{task_id}"), f"tasks/{task_id}")
        return list(task.labels)

    def replace_task_labels(self, task_id: str, labels: list[str]) -> None:
        logger.debug(f"Setting labels {labels} on task {task_id}")
        self._post(f"tasks/{task_id}", {"labels": labels})

    def set_task_priority(self, task_id: str, priority: int) -> None:
        self._post(f"tasks/{task_id}", {"priority": priority})
