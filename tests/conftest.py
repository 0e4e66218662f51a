"""Shared test fixtures."""

import pytest

from todoist_assistant.errors import TransportError
from todoist_assistant.models import Issue, Project, Task
from todoist_assistant.providers.base import IssueSource, TaskRepository
from todoist_assistant.settings import AssistantSettings, JiraInstance, TodoistSettings


class FakeTaskRepository(TaskRepository):
    """In-memory Todoist: keeps task state and records every call that writes."""

    def __init__(self, projects: list[Project] | None = None, tasks: list[Task] | None = None) -> None:
        self.projects = list(projects or [])
        self.tasks: dict[str, Task] = {t.id: t for t in tasks or []}
        self.completed: list[str] = []
        self.calls: list[tuple] = []
        self.fail_for_project: set[str] = set()
        self._next_id = 1000

    @property
    def writes(self) -> list[tuple]:
        return [c for c in self.calls if c[0] in ("create", "complete", "replace_labels", "set_priority")]

    def list_projects(self) -> list[Project]:
        return list(self.projects)

    def list_all_tasks(self) -> list[Task]:
        return list(self.tasks.values())

    def list_tasks_for_project(self, project_id: str) -> list[Task]:
        if project_id in self.fail_for_project:
            raise TransportError(f"boom for project {project_id}")
        return [t for t in self.tasks.values() if t.project_id == project_id]

    def create_task(self, content: str, project_id: str | None = None) -> Task:
        self.calls.append(("create", content, project_id))
        self._next_id += 1
        task = Task(id=str(self._next_id), content=content, priority=1, project_id=project_id)
        self.tasks[task.id] = task
        return task

    def complete_task(self, task_id: str) -> None:
        self.calls.append(("complete", task_id))
        self.completed.append(task_id)
        self.tasks.pop(task_id)

    def get_task_labels(self, task_id: str) -> list[str]:
        return list(self.tasks[task_id].labels)

    def replace_task_labels(self, task_id: str, labels: list[str]) -> None:
        self.calls.append(("replace_labels", task_id, list(labels)))
        self.tasks[task_id] = self.tasks[task_id].model_copy(update={"labels": list(labels)})

    def set_task_priority(self, task_id: str, priority: int) -> None:
        self.calls.append(("set_priority", task_id, priority))
        self.tasks[task_id] = self.tasks[task_id].model_copy(update={"priority": priority})


class FakeIssueSource(IssueSource):
    def __init__(self, issues: list[Issue]) -> None:
        self.issues = issues
        self.queries: list[str] = []

    def fetch_issues(self, jql: str) -> list[Issue]:
        self.queries.append(jql)
        return list(self.issues)


@pytest.fixture
def jira_instance() -> JiraInstance:
    return JiraInstance(
        site="https://example.atlassian.net",
        username="me@example.com",
        token="jira_token",
        jql="assignee = currentUser()",
        labels=["Work"],
        completion_statuses=["Done", "Closed"],
        sync_jira_labels=True,
        sync_jira_components=True,
        priority_map={"p1": ["Highest", "Blocker"], "p3": ["Low"], "p4": ["Lowest"]},
    )


@pytest.fixture
def todoist_settings() -> TodoistSettings:
    return TodoistSettings(
        token="todoist_token",
        assign_project_label=True,
        assign_next_action_label=True,
    )


@pytest.fixture
def settings(jira_instance: JiraInstance, todoist_settings: TodoistSettings) -> AssistantSettings:
    return AssistantSettings(todoist=todoist_settings, jira=[jira_instance])  # type: ignore[call-arg]


@pytest.fixture
def sample_issue() -> Issue:
    return Issue(
        key="PROJ-12",
        summary="Fix bug",
        status="In Progress",
        labels=["bug"],
        components=["api"],
        priority="Highest",
    )


@pytest.fixture
def make_repository():
    return FakeTaskRepository


@pytest.fixture
def make_issue_source():
    return FakeIssueSource
