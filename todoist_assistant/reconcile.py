"""Mirror Jira issues into Todoist tasks.

Every issue returned by an instance's JQL query maps onto at most one Todoist
task. The link lives in the task content itself, written as a markdown link
whose text starts with the issue key::

    [[PROJ-12] Fix bug](https://example.atlassian.net/browse/PROJ-12)

so the mapping is re-derived from a fresh task listing on every run and no
local state is kept between runs.
"""

import logging
import re
from collections.abc import Callable

from todoist_assistant.errors import MappingError
from todoist_assistant.models import PRIORITY_TIERS, Issue, Project, ReconcileSummary, Task
from todoist_assistant.providers.base import IssueSource, TaskRepository, find_project_id
from todoist_assistant.providers.jira import JiraProvider
from todoist_assistant.settings import JiraInstance

LINK_PATTERN = re.compile(r"\[([A-Z0-9-]+)\] .+\]\(.+\)\Z")

JIRA_LABEL_PREFIX = "Jira/"


def extract_issue_key(content: str) -> str | None:
    """Return the Jira key a task's content links to, or None."""
    match = LINK_PATTERN.search(content)
    return match.group(1) if match else None


def index_linked_tasks(tasks: list[Task]) -> dict[str, Task]:
    """Map issue key -> task. When several tasks carry the same key the first one wins."""
    index: dict[str, Task] = {}
    for task in tasks:
        key = extract_issue_key(task.content)
        if key:
            index.setdefault(key, task)
    return index


def format_task_content(site: str, issue: Issue) -> str:
    url = f"{site.rstrip('/')}/browse/{issue.key}"
    return f"[[{issue.key}] {issue.summary}]({url})"


def resolve_priority_tier(instance: JiraInstance, priority_name: str | None) -> str:
    """Return the tier (p1..p4) for a Jira priority name.

    Tiers are scanned from p1 down to p4, so a name listed under two tiers
    resolves to the more urgent one. Unknown names get ``default_priority``.
    """
    if priority_name is not None:
        for tier in PRIORITY_TIERS:
            if priority_name in instance.priority_map.get(tier, []):
                return tier
    if instance.default_priority is None:
        raise MappingError(f"Jira priority {priority_name!r} matches no tier and no default_priority is set")
    return instance.default_priority


def desired_labels(instance: JiraInstance, issue: Issue) -> list[str]:
    labels = list(instance.labels)
    if instance.sync_jira_labels:
        labels += [f"{JIRA_LABEL_PREFIX}Label/{name}" for name in issue.labels]
    if instance.sync_jira_components:
        labels += [f"{JIRA_LABEL_PREFIX}Component/{name}" for name in issue.components]
    return labels


def reconcile_labels(current: list[str], desired: list[str]) -> list[str]:
    """Drop stale ``Jira/`` labels, keep every other label, then add the desired ones.

    Surviving labels keep their order; new labels are appended in desired order.
    """
    result = [label for label in current if not label.startswith(JIRA_LABEL_PREFIX) or label in desired]
    for label in desired:
        if label not in result:
            result.append(label)
    return result


class JiraReconciler:
    def __init__(
        self,
        repository: TaskRepository,
        issue_source_factory: Callable[[JiraInstance], IssueSource] = JiraProvider,
        logger: logging.Logger | None = None,
    ) -> None:
        self.repository = repository
        self.issue_source_factory = issue_source_factory
        self.logger = logger or logging.getLogger(__name__)

    def reconcile_instance(
        self,
        instance: JiraInstance,
        all_tasks: list[Task],
        projects: list[Project],
    ) -> ReconcileSummary:
        """Bring Todoist in line with one Jira instance.

        Raises on the first failure; the caller decides whether other
        instances still run.
        """
        summary = ReconcileSummary(site=instance.site)

        linked = index_linked_tasks(all_tasks)
        self.logger.debug(f"Issues already in Todoist: {', '.join(sorted(linked)) or '(none)'}")

        target_project_id = None
        if instance.project:
            target_project_id = find_project_id(projects, instance.project)

        self.logger.info(f"Fetching issues from Jira instance {instance.site}")
        issues = self.issue_source_factory(instance).fetch_issues(instance.jql)

        for issue in issues:
            self._reconcile_issue(instance, issue, linked.get(issue.key), target_project_id, summary)

        self.logger.info(f"Finished processing Jira instance {instance.site}")
        return summary

    def _reconcile_issue(
        self,
        instance: JiraInstance,
        issue: Issue,
        task: Task | None,
        target_project_id: str | None,
        summary: ReconcileSummary,
    ) -> None:
        is_done = issue.status in instance.completion_statuses

        if task is None:
            if is_done:
                self.logger.debug(f"Skipping completed issue [{issue.key}] {issue.summary}")
                summary.skipped += 1
                return
            content = format_task_content(instance.site, issue)
            task = self.repository.create_task(content, target_project_id)
            self.logger.info(f"Created Todoist task: {content}")
            summary.created += 1
        else:
            self.logger.debug(f"Todoist task already exists for Jira issue [{issue.key}]")
            if is_done:
                self.repository.complete_task(task.id)
                self.logger.info(f"Completed task {task.content}")
                summary.completed += 1
                return

        priority = PRIORITY_TIERS[resolve_priority_tier(instance, issue.priority)]
        if task.priority != priority:
            self.logger.debug(f"Setting priority to {priority} for task {task.content}")
            self.repository.set_task_priority(task.id, priority)
            summary.priority_updates += 1

        labels = reconcile_labels(task.labels, desired_labels(instance, issue))
        if labels and set(labels) != set(task.labels):
            self.repository.replace_task_labels(task.id, labels)
            summary.label_updates += 1
        else:
            self.logger.debug(f"No need to sync Jira labels for task {task.content}")
