"""Custom exceptions for the Data View sample."""
from typing import Optional

class DataViewSampleException(Exception):
    """Base exception for the Data View sample."""
    pass

class ConfigurationError(DataViewSampleException):
    """Required settings are missing or malformed."""
    pass

class AuthenticationError(DataViewSampleException):
    """Authentication failed."""
    pass

class AuthorizationError(DataViewSampleException):
    """Authorization failed."""
    pass

class RemoteServiceError(DataViewSampleException):
    """The remote service answered with an error status."""

    def __init__(self, message: str, status_code: Optional[int] = None, operation_id: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.operation_id = operation_id

class ResourceNotFoundError(RemoteServiceError):
    """The requested resource does not exist."""
    pass

class ResourceConflictError(RemoteServiceError):
    """A resource with the same id but a different definition already exists."""
    pass

class ValidationError(DataViewSampleException):
    """Validation failed."""
    pass

class WorkflowStepError(DataViewSampleException):
    """A forward step of the sample workflow failed."""

    def __init__(self, step: int, title: str, cause: BaseException):
        super().__init__(f"Step {step} ({title}) failed: {cause}")
        self.step = step
        self.title = title
        self.cause = cause
