"""Settings resolution: config.toml values with environment overrides."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

import tomlkit
import typer
from pydantic import BaseModel, Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

CONFIG_PATH = Path("config.toml")

Tier = Literal["p1", "p2", "p3", "p4"]


class TodoistSettings(BaseModel):
    token: SecretStr | None = None
    next_action_label: str = "Next Action"
    assign_project_label: bool = False
    assign_next_action_label: bool = False
    parent_project_name: str | None = None  # restrict labeling to children of this project
    projects_label_prefix: str = "Projects"


class JiraInstance(BaseModel):
    site: str  # https://example.atlassian.net
    username: str = ""
    token: SecretStr | None = None
    jql: str
    labels: list[str] = []  # always applied to mirrored tasks
    completion_statuses: list[str] = []
    project: str | None = None  # target Todoist project name, inbox when unset
    sync_jira_labels: bool = False
    sync_jira_components: bool = False
    priority_map: dict[Tier, list[str]] = {}
    default_priority: Tier | None = "p2"


class AssistantSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "error"
    update_interval: int = Field(default=5, gt=0)  # minutes
    todoist: TodoistSettings = TodoistSettings()
    jira: list[JiraInstance] = []

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # config.toml values arrive as init kwargs; env vars and .env win over them
        return env_settings, dotenv_settings, init_settings, file_secret_settings


@lru_cache(maxsize=1)
def _load_toml(path: Path) -> dict:
    """Load the config file as plain Python data, returning {} if missing."""
    if not path.exists():
        return {}
    return tomlkit.parse(path.read_text()).unwrap()


def get_settings(config_path: Path | None = None) -> AssistantSettings:
    """Return validated settings from config.toml, overridden by the environment.

    Environment variables use ``__`` for nesting, e.g. ``TODOIST__TOKEN`` or
    ``TODOIST__ASSIGN_NEXT_ACTION_LABEL=true``.
    """
    path = config_path or CONFIG_PATH

    try:
        settings = AssistantSettings(**_load_toml(path))
    except ValidationError as exc:
        typer.echo(f"Invalid configuration in {path}:\n{exc}")
        raise typer.Exit(1) from exc

    if not settings.todoist.token:
        typer.echo(f"Missing Todoist credentials. Set TODOIST__TOKEN or token in the [todoist] section of {path}")
        raise typer.Exit(1)

    return settings
