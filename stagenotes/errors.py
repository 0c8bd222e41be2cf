"""
StageNotes – error taxonomy.

Every error raised by the store, the composer and the board view derives
from ``BoardError`` and carries the HTTP status the API reports it with.
"""

import math


class BoardError(Exception):
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(BoardError):
    """Empty / too long text or title, unknown note type, malformed code."""
    status_code = 400


class NotFoundError(BoardError):
    status_code = 404


class LockedError(BoardError):
    status_code = 409

    def __init__(self, detail: str = "Board is locked"):
        super().__init__(detail)


class RateLimitedError(BoardError):
    status_code = 429

    def __init__(self, retry_after_ms: float):
        self.retry_after_ms = retry_after_ms
        super().__init__(f"Please wait {self.retry_after_seconds} seconds before posting again")

    @property
    def retry_after_seconds(self) -> int:
        return max(1, math.ceil(self.retry_after_ms / 1000))


class ExternalStoreError(BoardError):
    """The database failed. Logged where it happens, shown to users generically."""
    status_code = 500
