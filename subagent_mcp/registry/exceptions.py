"""Exceptions for the sub-agent registry and the persisted group format."""


class RegistryError(Exception):
    """Raised when a registry cannot be built (no groups, duplicate ids)."""

    pass


class LoaderError(Exception):
    """Base class for group persistence failures."""

    pass


class GroupsNotFoundError(LoaderError):
    """Raised when the groups file or directory does not exist."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Groups not found at {path}. Run 'subagent-mcp build' first.")


class GroupsFormatError(LoaderError):
    """Raised when persisted groups cannot be decoded."""

    pass
