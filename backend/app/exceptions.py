"""
Accounting Notes Backend: Custom Exception Hierarchy
====================================================

What:  Application-specific exceptions for the different error scenarios.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return the JSON error envelope with the matching HTTP status code.
Who:   Raised by services and the admin guard; caught by global handlers or,
       for the audio pipeline, recovered locally by NotesService.

Exception Hierarchy:
    AccountingNotesError (base)
    ├── ValidationError      → 400 Bad Request
    ├── UnauthorizedError    → 401 Unauthorized (wrong password)
    ├── ForbiddenError       → 403 Forbidden (admin mode required)
    ├── NotFoundError        → 404 Not Found
    ├── ConflictError        → 409 Conflict (duplicate unique field)
    ├── DatabaseError        → 500 Internal Server Error
    ├── SynthesisError       → never surfaced, absorbed by the notes pipeline
    └── StorageError         → never surfaced by the notes pipeline, 500 elsewhere

User-facing messages are Polish, matching the frontend.
"""

from typing import Any, Dict, Optional


class AccountingNotesError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "Wystąpił nieoczekiwany błąd",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(AccountingNotesError):
    """
    Raised when client input fails a business rule.

    Schema-level problems are rejected before they reach the services (the
    RequestValidationError handler answers 400); this covers what Pydantic
    cannot express.
    """

    status_code = 400
    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Nieprawidłowe dane",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class UnauthorizedError(AccountingNotesError):
    """Raised when admin credentials do not match."""

    status_code = 401
    error_code = "unauthorized"

    def __init__(
        self,
        message: str = "Nieprawidłowe hasło",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(AccountingNotesError):
    """
    Raised by the admin guard when the `role` cookie is not ADMIN.

    HTTP: 403 Forbidden
    """

    status_code = 403
    error_code = "forbidden"

    def __init__(
        self,
        message: str = "Operacja dostępna tylko w trybie Admin",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(AccountingNotesError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; services convert that None
    into NotFoundError so the global handler can answer 404.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        message: str = "Nie znaleziono zasobu",
        resource: Optional[str] = None,
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if resource:
            ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(AccountingNotesError):
    """
    Raised when a unique field would be duplicated.

    When: category name reused, topic title reused inside a category,
          admin registered twice.
    HTTP: 409 Conflict
    """

    status_code = 409
    error_code = "conflict"

    def __init__(
        self,
        message: str = "Zasób już istnieje",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class DatabaseError(AccountingNotesError):
    """
    Raised when database operations fail unexpectedly.

    Security Note:
        The message returned to the client is always generic. SQL, constraint
        names and driver errors are logged server-side only.
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "Błąd bazy danych. Spróbuj ponownie później.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class SynthesisError(AccountingNotesError):
    """
    Raised when speech synthesis cannot produce a usable audio file.

    When:
        - the gTTS engine raised (after retries)
        - the temporary file was never written
        - the written file is below settings.tts_min_audio_bytes
        - the text carries no letter or digit

    NotesService catches this and keeps the previous audio reference, so the
    content update still succeeds.
    """

    error_code = "synthesis_error"

    def __init__(
        self,
        message: str = "Nie udało się wygenerować nagrania",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StorageError(AccountingNotesError):
    """
    Raised when an object storage call fails for a reason other than
    "object not found" on delete (which StorageService swallows).
    """

    error_code = "storage_error"

    def __init__(
        self,
        message: str = "Operacja na magazynie plików nie powiodła się",
        key: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if key:
            ctx["key"] = key
        super().__init__(message=message, context=ctx)
        self.key = key
