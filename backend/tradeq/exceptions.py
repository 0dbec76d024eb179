"""
Errors raised by the trade services.

Each carries the HTTP status the API answers with; main.py maps them to
{"detail": message} responses so services stay free of FastAPI imports.
The worker treats StorageError as transient and retries next cycle.
"""


class AppError(Exception):
    """Base error; status_code is the HTTP status the API responds with."""

    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ValidationError(AppError):
    """Trade failed an ingestion rule (account, symbol, volume/open/close, side); 400."""

    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class StorageError(AppError):
    """Database failure while opening, running or committing a transaction (500)."""

    def __init__(self, message: str = "Storage failure"):
        super().__init__(message, status_code=500)


class ServiceUnavailableError(AppError):
    """Database not reachable (503)."""

    def __init__(self, message: str = "Database not available"):
        super().__init__(message, status_code=503)
