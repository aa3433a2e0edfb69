"""
Typed failures raised by the registry.

Every expected failure of a registry operation is one of these classes, so
callers can branch on the exception type or on ``kind``.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Enumeration of registry failure kinds"""

    INVALID_PAYLOAD = "invalid_payload"
    INVALID_EMAIL = "invalid_email"
    PROJECT_NOT_FOUND = "project_not_found"
    PROJECT_SUSPENDED = "project_suspended"
    ALREADY_SUSPENDED = "already_suspended"
    INACTIVE_PROJECT = "inactive_project"
    PROJECT_BUSY = "project_busy"


class RegistryError(Exception):
    kind: ErrorKind

    def __init__(self, message: str, project_id: str | None = None):
        super().__init__(message)
        self.message = message
        self.project_id = project_id


class InvalidPayload(RegistryError):
    kind = ErrorKind.INVALID_PAYLOAD

    def __init__(self, errors: list[str], project_id: str | None = None):
        super().__init__("Invalid project payload", project_id)
        self.errors = errors


class InvalidEmail(RegistryError):
    kind = ErrorKind.INVALID_EMAIL

    def __init__(self, email: str, project_id: str | None = None):
        super().__init__(f"Invalid email address: {email!r}", project_id)
        self.email = email


class ProjectNotFound(RegistryError):
    kind = ErrorKind.PROJECT_NOT_FOUND

    def __init__(self, project_id: str):
        super().__init__(f"Project {project_id} does not exist", project_id)


class ProjectSuspended(RegistryError):
    kind = ErrorKind.PROJECT_SUSPENDED

    def __init__(self, project_id: str):
        super().__init__(f"Project {project_id} is suspended", project_id)


class AlreadySuspended(RegistryError):
    kind = ErrorKind.ALREADY_SUSPENDED

    def __init__(self, project_id: str):
        super().__init__(f"Project {project_id} is already suspended", project_id)


class InactiveProject(RegistryError):
    kind = ErrorKind.INACTIVE_PROJECT

    def __init__(self, project_id: str):
        super().__init__(f"Project {project_id} is not active", project_id)


class ProjectBusy(RegistryError):
    """Another holder kept the project's lock past the blocking timeout."""

    kind = ErrorKind.PROJECT_BUSY

    def __init__(self, project_id: str):
        super().__init__(
            f"Project {project_id} is locked by another operation", project_id
        )
