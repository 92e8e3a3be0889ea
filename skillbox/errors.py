"""Exception types raised by Skillbox operations.

Every exception carries a message that is safe to show to the user;
command handlers convert them into an error line or a JSON error object.
"""


class SkillboxError(Exception):
    """Base class for user-facing Skillbox failures."""


class FetchError(SkillboxError):
    """Raised when a remote resource cannot be fetched (network or non-2xx)."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch {url}: {reason}")


class SkillNotFoundError(SkillboxError):
    """Raised when a skill is not present in the index."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Skill not found: {name}")


class IngestError(SkillboxError):
    """Raised when an ingest payload fails validation."""


class RepoRefError(SkillboxError):
    """Raised when a repository reference cannot be parsed or resolved."""
