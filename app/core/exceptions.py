from typing import Optional, Any


class MealMateError(Exception):
    """
    Base exception for the MealMate API.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class ResourceNotFoundError(MealMateError):
    """
    Raised when a requested resource is not found.
    """
    def __init__(self, message: str = "Resource not found", details: Optional[Any] = None):
        super().__init__(message, code="NOT_FOUND", status_code=404, details=details)


class AuthenticationError(MealMateError):
    """
    Raised when the bearer token is missing or invalid.
    """
    def __init__(self, message: str = "Unauthorized access", details: Optional[Any] = None):
        super().__init__(message, code="AUTHENTICATION_FAILED", status_code=401, details=details)


class AuthorizationError(MealMateError):
    """
    Raised when the caller's role does not allow the operation.
    """
    def __init__(self, message: str = "Forbidden access", details: Optional[Any] = None):
        super().__init__(message, code="FORBIDDEN", status_code=403, details=details)


class PaymentRequiredError(MealMateError):
    """
    Raised when a Bronze (free tier) user hits a paid-tier route.
    """
    def __init__(self, message: str = "Payment required", details: Optional[Any] = None):
        super().__init__(message, code="PAYMENT_REQUIRED", status_code=402, details=details)


class DuplicateActionError(MealMateError):
    """
    Raised when a once-only action (like, request) is repeated.
    """
    def __init__(self, message: str = "Action already performed", details: Optional[Any] = None):
        super().__init__(message, code="DUPLICATE_ACTION", status_code=400, details=details)


class ValidationError(MealMateError):
    """
    Raised when input validation fails.
    """
    def __init__(self, message: str = "Validation error", details: Optional[Any] = None):
        super().__init__(message, code="VALIDATION_ERROR", status_code=422, details=details)


class ExternalServiceError(MealMateError):
    """
    Raised when an external service (e.g., Stripe) fails.
    """
    def __init__(self, message: str = "External service error", details: Optional[Any] = None):
        super().__init__(message, code="EXTERNAL_SERVICE_ERROR", status_code=502, details=details)
