from fastapi import HTTPException


class ValidationFailed(HTTPException):
    def __init__(self, detail: str) -> None:
        super().__init__(status_code=400, detail=detail)


class Unauthorized(HTTPException):
    def __init__(self) -> None:
        super().__init__(status_code=401, detail="Unauthorized")


class NotFound(HTTPException):
    """Record is absent or belongs to someone else; callers cannot tell which."""

    def __init__(self, resource: str = "Record", detail: str | None = None) -> None:
        super().__init__(status_code=404, detail=detail or f"{resource} not found")


class ConcurrencyConflict(HTTPException):
    def __init__(self) -> None:
        super().__init__(status_code=409, detail="Account was modified or is no longer available")


class AlreadyExists(HTTPException):
    def __init__(self, resource: str) -> None:
        super().__init__(status_code=409, detail=f"{resource} already exists")
