"""Exceptions raised by the graph export pipeline."""

from typing import Optional


class GraphExportError(Exception):
    """Base class for export failures that are reported to the user."""


class PreconditionError(GraphExportError):
    """The graph view is not the active view, so nothing is scanned."""


class EmptyScopeError(GraphExportError):
    """The configured scope contains no documents."""

    def __init__(self, scope: str):
        self.scope = scope
        where = f"'{scope}'" if scope else "the vault"
        super().__init__(f"No documents found in {where}")


class ExportWriteError(GraphExportError):
    """The output artifact could not be created or overwritten."""

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause
        message = f"Could not write {path}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class ExportInProgressError(ExportWriteError):
    """Another export currently holds the lock for the same output path."""

    def __init__(self, path: str, lock_path: Optional[str] = None):
        super().__init__(path)
        self.lock_path = lock_path
        message = f"An export to {path} is already running"
        if lock_path:
            message = f"{message} (remove {lock_path} if it is not)"
        self.args = (message,)
