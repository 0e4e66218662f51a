"""Per-project labeling: project-name labels and a single "next action" per project."""

import logging

from todoist_assistant.errors import TransportError
from todoist_assistant.models import LabelingSummary, Project, Task
from todoist_assistant.providers.base import TaskRepository, find_project_id
from todoist_assistant.settings import TodoistSettings

# Tasks starting with this marker can't be completed and never become the next action.
NON_ACTIONABLE_PREFIX = "* "


class ProjectLabeler:
    def __init__(
        self,
        repository: TaskRepository,
        settings: TodoistSettings,
        logger: logging.Logger | None = None,
    ) -> None:
        self.repository = repository
        self.settings = settings
        self.logger = logger or logging.getLogger(__name__)

    def select_projects(self, projects: list[Project]) -> list[Project]:
        """Return the projects to label: all of them, or the direct children of the parent project."""
        if not self.settings.parent_project_name:
            return list(projects)
        self.logger.debug("Getting parent project")
        parent_id = find_project_id(projects, self.settings.parent_project_name)
        return [p for p in projects if p.parent_id == parent_id]

    def process_projects(self, projects: list[Project]) -> LabelingSummary:
        summary = LabelingSummary()

        self.logger.info("Processing projects")
        for project in self.select_projects(projects):
            self.logger.debug(f"Getting tasks for project {project.id} ({project.name})")
            try:
                self.process_project(project, summary)
            except TransportError as exc:
                self.logger.error(f"Error processing project {project.id} ({project.name}): {exc}")
                summary.failed_projects.append(project.name)
                continue
            summary.projects += 1
            self.logger.info(f"Completed processing of project {project.id} ({project.name})")

        return summary

    def process_project(self, project: Project, summary: LabelingSummary) -> None:
        tasks = self.repository.list_tasks_for_project(project.id)
        # API order is priority order: the first actionable task is the next action.
        eligible = True
        for task in tasks:
            eligible = self._process_task(project, task, eligible, summary)

    def _process_task(self, project: Project, task: Task, eligible: bool, summary: LabelingSummary) -> bool:
        """Apply the labeling rules to one task; return whether a later task may still become the next action."""
        if self.settings.assign_project_label:
            label = f"{self.settings.projects_label_prefix}/{project.name}"
            if label not in task.labels:
                self.logger.debug(f"Adding project label {label} to task {task.content}")
                self.repository.add_labels_to_task(task.id, [label])
                summary.labels_added += 1

        if not self.settings.assign_next_action_label:
            return eligible

        next_action = self.settings.next_action_label
        if eligible and not task.content.startswith(NON_ACTIONABLE_PREFIX):
            if next_action not in task.labels:
                self.logger.debug(f"Adding next action label to task {task.content}")
                self.repository.add_labels_to_task(task.id, [next_action])
                summary.labels_added += 1
            return False

        if next_action in task.labels:
            self.logger.debug(f"Removing next action label from task {task.content}")
            self.repository.remove_labels_from_task(task.id, [next_action])
            summary.labels_removed += 1
        return eligible
