"""Error types shared by the profile validator and the Pages deployer."""

from dataclasses import dataclass
from typing import Optional


class DeployError(Exception):
    """A fatal condition with a human-readable cause and optional remediation hints."""

    def __init__(self, message: str, hints: Optional[list] = None):
        super().__init__(message)
        self.message = message
        self.hints = list(hints or [])


class ProfileNotFound(DeployError):
    pass


class MalformedInput(DeployError):
    pass


class MissingDependency(DeployError):
    def __init__(self, tools: list, hints: Optional[list] = None):
        super().__init__(f"Missing required tool(s): {', '.join(tools)}", hints)
        self.tools = list(tools)


class MissingRequiredField(DeployError):
    def __init__(self, field_path: str, source: str, hints: Optional[list] = None):
        super().__init__(f"Missing '{field_path}' in {source}", hints)
        self.field_path = field_path


class AuthenticationFailure(DeployError):
    pass


class GitHubAPIError(DeployError):
    pass


class GitCommandError(DeployError):
    pass


class PushFailure(DeployError):
    pass


class RepositoryCreateFailure(PushFailure):
    pass


class PagesConfigFailure(DeployError):
    """Non-fatal: Pages may already be enabled for the repository."""


@dataclass
class IdentityMismatch:
    """Warning value: the token belongs to someone other than the profile's username."""
    configured: str
    authenticated: str

    def __str__(self) -> str:
        return (f"Authenticated user ({self.authenticated}) differs from "
                f"profile username ({self.configured})")
