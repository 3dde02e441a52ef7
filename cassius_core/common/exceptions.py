# cassius_core/common/exceptions.py
from __future__ import annotations

from rest_framework import status
from rest_framework.exceptions import APIException


class StorageError(APIException):
    """
    Datastore unavailable or constraint violated while persisting a record.
    Raised from services (chained to the DatabaseError) so it reaches the
    caller's transaction and, for API calls, the global exception handler.
    """
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Storage unavailable."
    default_code = "storage_error"

    def __init__(self, detail=None, code=None):
        super().__init__(detail=detail or self.default_detail, code=code or self.default_code)


class ConflictError(APIException):
    """
    409 Conflict that still flows through the global exception handler.
    Use when business rules block an action (e.g. cancelling a completed appointment).
    """
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict."
    default_code = "conflict"

    def __init__(self, detail=None, code=None):
        super().__init__(detail=detail or self.default_detail, code=code or self.default_code)
