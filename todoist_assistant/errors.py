"""Error taxonomy shared by providers, engines and the runner."""


class AssistantError(RuntimeError):
    """Base class for every failure the runner knows how to scope."""


class ConfigurationError(AssistantError):
    """A configured project name resolves to zero or several Todoist projects."""


class TransportError(AssistantError):
    """A remote API call failed: bad status, network failure or undecodable body."""


class MappingError(AssistantError):
    """A Jira priority matches no configured tier and no default tier is set."""
