"""
Shared error handling for the pricing engine.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    code: str
    message: str
    details: Dict[str, Any] = {}


class PricingError(Exception):
    """Base exception for the pricing engine."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            details=self.details
        )


class ConfigurationError(PricingError):
    """Malformed pricing rule definitions, rejected at build time."""

    def __init__(self, message: str = "Invalid pricing rule configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)


class EvaluationError(PricingError):
    """Unsupported or type-mismatched comparison during rule evaluation."""

    def __init__(self, message: str = "Pricing rule evaluation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("EVALUATION_ERROR", message, details)


class ValidationError(PricingError):
    """Validation-related errors."""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)
