class AppError(Exception):
    """Base class for all engine exceptions."""
    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

class SchedulerError(AppError):
    """Raised when a timetable run fails for a reason other than bad placement."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, details=details)

class ConfigurationError(AppError):
    """Raised when engine configuration is invalid."""
    def __init__(self, message: str):
        super().__init__(message)
