"""Custom exceptions for primpact."""


class PrImpactError(Exception):
    """Base exception for all primpact errors."""


class ConfigError(PrImpactError):
    """Configuration-related errors."""


class GitError(PrImpactError):
    """A git invocation failed."""


class RepositoryError(GitError):
    """The given path is not a git work tree."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Not a git repository: {path}")


class RefError(GitError):
    """A ref could not be resolved to a commit."""

    def __init__(self, ref: str, detail: str = ""):
        self.ref = ref
        message = f"Invalid git ref '{ref}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class FileNotFoundAtRefError(GitError):
    """The requested path does not exist at the given ref."""

    def __init__(self, ref: str, path: str):
        self.ref = ref
        self.path = path
        super().__init__(f"'{path}' does not exist at '{ref}'")
