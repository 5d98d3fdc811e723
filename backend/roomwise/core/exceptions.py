class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class InvalidArgumentError(AppError):
    """Raised when a caller supplies malformed identifiers, terms or filters."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class ResourceNotFoundError(AppError):
    """Raised when one or more requested resources do not resolve."""
    def __init__(self, missing: dict[str, int]):
        described = ", ".join(f"{resource_type} with id {resource_id}" for resource_type, resource_id in missing.items())
        super().__init__(f"Not found: {described}", status_code=404, details={"missing": missing})

class ConflictCheckError(AppError):
    """Raised when the primary conflict lookup fails; callers must assume a conflict."""
    def __init__(self, message: str):
        super().__init__(message, status_code=503)
