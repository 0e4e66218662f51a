"""Shared pydantic models: the contract between providers and the sync engines."""

from pydantic import BaseModel, ConfigDict, Field

# Config tier -> Todoist API priority (the API counts upwards: 4 is most urgent).
PRIORITY_TIERS = {"p1": 4, "p2": 3, "p3": 2, "p4": 1}


class Project(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    parent_id: str | None = None


class Task(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    content: str
    labels: list[str] = []  # API order, compared as a set
    priority: int | None = None
    project_id: str | None = None


class Issue(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str = Field(pattern=r"^[A-Z0-9-]+$")  # PROJ-123
    summary: str
    status: str
    labels: list[str] = []
    components: list[str] = []
    priority: str | None = None  # None when the issue has no priority set


class ReconcileSummary(BaseModel):
    """Counters for one Jira instance."""

    site: str
    created: int = 0
    completed: int = 0
    skipped: int = 0
    priority_updates: int = 0
    label_updates: int = 0


class LabelingSummary(BaseModel):
    """Counters for one project labeling pass."""

    projects: int = 0
    labels_added: int = 0
    labels_removed: int = 0
    failed_projects: list[str] = []


class RunResult(BaseModel):
    """Outcome of a single poll tick."""

    reconciled: list[ReconcileSummary] = []
    labeling: LabelingSummary | None = None
    errors: list[str] = []
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return not self.errors
