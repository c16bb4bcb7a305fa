"""
LibraryHub Backend — Custom Exception Hierarchy
=================================================

What:  Application exceptions. main.py maps each one to an HTTP status and
       renders `{error, message, details?, request_id}`.

Exception Hierarchy:
    LibraryError (base)           error code
    ├── ValidationError       400 validation_error   (missing/invalid parameter)
    ├── AuthenticationError   401 unauthorized       (missing/invalid cookie)
    ├── NotFoundError         404 not_found
    └── DatabaseError         500 server_error

Only the fail-visible paths (search, category tree, user lookup) raise these.
Recommendation and loan-history blocks degrade to empty results instead; see
services/best_effort.py.
"""

from typing import Any, Dict, Optional


class LibraryError(Exception):
    """
    Base exception for all LibraryHub errors.

    Attributes:
        message:  User-facing description, safe to return in a response.
        context:  Debug details. Logged; only ValidationError returns them
                  to the client, as `details`.
    """

    error_code = "server_error"

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = dict(context or {})


class ValidationError(LibraryError):
    """
    A request broke a business rule: an empty search query, an illegal loan
    state change. Schema-level problems stay FastAPI's 422.
    """

    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Invalid request",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, context)
        self.field = field
        if field:
            self.context["field"] = field


class AuthenticationError(LibraryError):
    """
    No usable session token: cookie missing, bad signature, expired, or no
    account number inside.
    """

    error_code = "unauthorized"

    def __init__(self, message: str = "access denied", context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context)


class NotFoundError(LibraryError):
    """
    A looked-up row does not exist. Services turn SQLAlchemy's None into
    this so routes never check for it.
    """

    error_code = "not_found"

    def __init__(self, resource: str, identifier: Optional[str] = None):
        if identifier is None:
            message = f"{resource} not found"
        else:
            message = f"{resource} '{identifier}' not found"
        super().__init__(message, {"resource": resource, "identifier": identifier})
        self.resource = resource
        self.identifier = identifier


class DatabaseError(LibraryError):
    """
    A query failed on a fail-visible path. The client always gets a generic
    message; `context["error_type"]` names the driver error for the logs.
    """

    def __init__(
        self,
        message: str = "Could not reach the library database. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, context)
