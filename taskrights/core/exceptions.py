"""
Custom Exceptions
Error taxonomy of the rights engine
"""

from typing import Any, Dict, Optional


class RightsError(Exception):
    """Base exception for all rights-engine errors"""

    def __init__(
        self,
        message: str,
        code: str = "rights_error",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class InvalidRightError(RightsError):
    """A right value outside the enumerated set. Always a caller bug."""

    def __init__(self, value: Any):
        super().__init__(
            message=f"Invalid right: {value!r}",
            code="invalid_right",
            status_code=400,
            details={"right": repr(value)},
        )
        self.value = value


class ResourceNotFoundError(RightsError):
    """Referenced resource does not exist"""

    def __init__(self, resource_type: str, resource_id: Any):
        super().__init__(
            message=f"{resource_type} {resource_id} not found",
            code="resource_not_found",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class GranteeNotFoundError(RightsError):
    """Referenced user or team does not exist"""

    def __init__(self, grantee_kind: str, grantee_id: Any):
        super().__init__(
            message=f"{grantee_kind} {grantee_id} not found",
            code="grantee_not_found",
            status_code=404,
            details={"grantee_kind": grantee_kind, "grantee_id": grantee_id},
        )


class GrantNotFoundError(RightsError):
    """Revoke targeted a grant that does not exist. Callers treat this as nothing to revoke."""

    def __init__(self, grantee_kind: str, grantee_id: Any, resource_type: str, resource_id: Any):
        super().__init__(
            message=f"{grantee_kind} {grantee_id} has no access to {resource_type} {resource_id}",
            code="grant_not_found",
            status_code=404,
            details={
                "grantee_kind": grantee_kind,
                "grantee_id": grantee_id,
                "resource_type": resource_type,
                "resource_id": resource_id,
            },
        )


class BackingStoreError(RightsError):
    """The grant store or resource loader failed"""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        details = {}
        if original_error is not None:
            details["original_error"] = str(original_error)
        super().__init__(
            message=message,
            code="backing_store_error",
            status_code=500,
            details=details,
        )
        self.original_error = original_error


class AccessDeniedError(RightsError):
    """Evaluation completed and the actor lacks the required right"""

    def __init__(
        self,
        message: str = "Access denied",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code="access_denied",
            status_code=403,
            details=details,
        )


class AuthenticationError(RightsError):
    """Token could not be turned into an actor"""

    def __init__(self, message: str = "Invalid or missing authentication token"):
        super().__init__(
            message=message,
            code="authentication_error",
            status_code=401,
        )
