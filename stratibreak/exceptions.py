"""Custom exceptions for Stratibreak."""


class StratibreakError(Exception):
    """Base exception for gap analysis errors."""


class DataValidationError(StratibreakError):
    """Raised when input data fails validation."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Validation error on '{field}': {message}")


class ProjectNotFoundError(StratibreakError):
    """Raised when a project ID does not exist for the tenant."""

    def __init__(self, project_id: str):
        self.project_id = project_id
        super().__init__(f"Project not found: {project_id}")


class IngestionError(StratibreakError):
    """Raised when a project snapshot cannot be imported."""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"Import error from {source}: {message}")


class AnalysisError(StratibreakError):
    """Raised when the analysis pipeline cannot produce a result."""

    def __init__(self, project_id: str, message: str):
        self.project_id = project_id
        super().__init__(f"Gap analysis failed for project {project_id}: {message}")


class ProjectConflictError(StratibreakError):
    """Raised when a project ID is already owned by a different tenant."""

    def __init__(self, project_id: str, tenant_id: str):
        self.project_id = project_id
        self.tenant_id = tenant_id
        super().__init__(f"Project {project_id} belongs to another tenant, not {tenant_id}")
