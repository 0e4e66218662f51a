"""One poll tick, and the fixed-interval loop that repeats it."""

import logging
import time
from collections.abc import Callable

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from todoist_assistant.errors import AssistantError, ConfigurationError
from todoist_assistant.labeling import ProjectLabeler
from todoist_assistant.models import Project, RunResult
from todoist_assistant.providers.base import IssueSource, TaskRepository
from todoist_assistant.providers.jira import JiraProvider
from todoist_assistant.reconcile import JiraReconciler
from todoist_assistant.settings import AssistantSettings, JiraInstance

logger = logging.getLogger(__name__)

JOB_ID = "todoist_assistant_sync"


def run_once(
    settings: AssistantSettings,
    repository: TaskRepository,
    issue_source_factory: Callable[[JiraInstance], IssueSource] = JiraProvider,
    log: logging.Logger | None = None,
) -> RunResult:
    """Reconcile every Jira instance, then label projects.

    Failures are recorded on the result and scoped: a broken instance does not
    stop the next one, and a broken Jira phase does not stop project labeling.
    Only a failure to list projects ends the run early.
    """
    log = log or logger
    start = time.monotonic()
    result = RunResult()

    log.debug("Getting projects")
    try:
        projects = repository.list_projects()
    except AssistantError as exc:
        log.error(f"Error fetching Todoist projects: {exc}")
        result.errors.append(f"projects: {exc}")
        result.elapsed = time.monotonic() - start
        return result

    if settings.jira:
        _reconcile_jira(settings, repository, issue_source_factory, log, projects, result)

    labeler = ProjectLabeler(repository, settings.todoist, logger=log)
    try:
        result.labeling = labeler.process_projects(projects)
    except ConfigurationError as exc:
        log.error(f"Error locating parent project: {exc}")
        result.errors.append(f"labeling: {exc}")
    else:
        result.errors += [f"project {name}: labeling failed" for name in result.labeling.failed_projects]

    result.elapsed = time.monotonic() - start
    log.info(f"Completed update in {result.elapsed:f} seconds")
    return result


def _reconcile_jira(
    settings: AssistantSettings,
    repository: TaskRepository,
    issue_source_factory: Callable[[JiraInstance], IssueSource],
    log: logging.Logger,
    projects: list[Project],
    result: RunResult,
) -> None:
    log.info("Fetching Todoist tasks")
    try:
        tasks = repository.list_all_tasks()
    except AssistantError as exc:
        log.error(f"Error fetching Todoist tasks: {exc}")
        result.errors.append(f"tasks: {exc}")
        return

    reconciler = JiraReconciler(repository, issue_source_factory, logger=log)
    for instance in settings.jira:
        try:
            result.reconciled.append(reconciler.reconcile_instance(instance, tasks, projects))
        except AssistantError as exc:
            log.error(f"Aborted Jira instance {instance.site}: {exc}")
            result.errors.append(f"{instance.site}: {exc}")


class SyncService:
    """Run a tick now, then every ``update_interval`` minutes until stopped."""

    def __init__(
        self,
        settings: AssistantSettings,
        repository: TaskRepository,
        issue_source_factory: Callable[[JiraInstance], IssueSource] = JiraProvider,
    ) -> None:
        self.settings = settings
        self.repository = repository
        self.issue_source_factory = issue_source_factory
        self.scheduler = BlockingScheduler()

    def tick(self) -> RunResult:
        result = run_once(self.settings, self.repository, self.issue_source_factory)
        logger.info(f"Waiting {self.settings.update_interval} minutes to perform the next update")
        return result

    def start(self) -> None:
        """Run the first tick, then block in the scheduler loop."""
        self.tick()
        self.scheduler.add_job(
            func=self.tick,
            trigger=IntervalTrigger(minutes=self.settings.update_interval),
            id=JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        logger.info("Sync scheduler started")
        self.scheduler.start()

    def stop(self) -> None:
        # Ctrl-C during the first tick arrives before the scheduler has started.
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        logger.info("Sync scheduler stopped")
