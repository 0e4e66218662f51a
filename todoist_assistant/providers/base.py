"""Abstract interfaces for the task manager and the issue tracker."""

from abc import ABC, abstractmethod

from todoist_assistant.errors import ConfigurationError
from todoist_assistant.models import Issue, Project, Task


class TaskRepository(ABC):
    @abstractmethod
    def list_projects(self) -> list[Project]: ...

    @abstractmethod
    def list_all_tasks(self) -> list[Task]: ...

    @abstractmethod
    def list_tasks_for_project(self, project_id: str) -> list[Task]: ...

    @abstractmethod
    def create_task(self, content: str, project_id: str | None = None) -> Task: ...

    @abstractmethod
    def complete_task(self, task_id: str) -> None: ...

    @abstractmethod
    def get_task_labels(self, task_id: str) -> list[str]: ...

    @abstractmethod
    def replace_task_labels(self, task_id: str, labels: list[str]) -> None: ...

    @abstractmethod
    def set_task_priority(self, task_id: str, priority: int) -> None: ...

    def add_labels_to_task(self, task_id: str, labels: list[str]) -> None:
        """Re-read the task's labels and write them back with ``labels`` appended."""
        current = self.get_task_labels(task_id)
        merged = current + [label for label in labels if label not in current]
        self.replace_task_labels(task_id, merged)

    def remove_labels_from_task(self, task_id: str, labels: list[str]) -> None:
        """Re-read the task's labels and write them back without ``labels``."""
        current = self.get_task_labels(task_id)
        self.replace_task_labels(task_id, [label for label in current if label not in labels])


class IssueSource(ABC):
    @abstractmethod
    def fetch_issues(self, jql: str) -> list[Issue]:
        """Return every issue matching ``jql``, across all result pages."""


def find_project_id(projects: list[Project], name: str) -> str:
    """Return the id of the single project called ``name``, raising ConfigurationError otherwise."""
    matches = [p.id for p in projects if p.name == name]
    if not matches:
        raise ConfigurationError(f"project {name} not found")
    if len(matches) > 1:
        raise ConfigurationError(f"found more than one project for name {name}")
    return matches[0]
