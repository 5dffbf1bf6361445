"""Carbon Impact Exception Hierarchy.

Exceptions raised by the calculators, the store and the configuration
layer, each carrying rich error context for logging and API responses.

Exception Hierarchy:
    CarbonImpactError (base)
    ├── ValidationError     -> HTTP 400
    ├── NotFoundError       -> HTTP 404
    ├── PersistenceError    -> HTTP 500
    └── ConfigurationError

All exceptions include:
- error_code: Unique error identifier
- calculator: Name of the calculator that raised the error
- context: Dictionary with error-specific details
- timestamp: When the error occurred

Example:
    >>> from carbon_impact.exceptions import ValidationError
    >>> raise ValidationError(
    ...     message="Inputs must be positive values.",
    ...     calculator="renewable",
    ...     invalid_fields={"availableLand": "must be > 0"},
    ... )
"""

import json
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


class CarbonImpactError(Exception):
    """Base exception for all carbon impact errors.

    Attributes:
        message: Human-readable error message
        error_code: Unique error identifier (e.g. "CI_VALIDATION_ERROR")
        calculator: Name of the calculator that raised the error (optional)
        context: Dictionary with error-specific details
        timestamp: When the error occurred (UTC)
        status_code: HTTP status the API layer maps this error to
    """

    ERROR_PREFIX = "CI"
    status_code = 500

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        calculator: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self._generate_error_code()
        self.calculator = calculator
        self.context = context or {}
        self.timestamp = datetime.now(timezone.utc)

    def _generate_error_code(self) -> str:
        """Generate an error code like "CI_VALIDATION_ERROR"."""
        class_name = self.__class__.__name__
        error_type = re.sub(r'(?<!^)(?=[A-Z])', '_', class_name).upper()
        return f"{self.ERROR_PREFIX}_{error_type}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "calculator": self.calculator,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }

    def to_json(self) -> str:
        """Convert exception to JSON string."""
        return json.dumps(self.to_dict(), indent=2, default=str)

    def __str__(self) -> str:
        parts = [f"[{self.error_code}]"]
        if self.calculator:
            parts.append(f"Calculator: {self.calculator}")
        parts.append(self.message)
        return " - ".join(parts)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message='{self.message}', "
            f"error_code='{self.error_code}', "
            f"calculator='{self.calculator}')"
        )


class ValidationError(CarbonImpactError):
    """Input validation failed.

    Raised when a required field is missing, non-numeric or not strictly
    positive.

    Example:
        >>> raise ValidationError(
        ...     message="All fields are required.",
        ...     calculator="renewable",
        ...     invalid_fields={"availableLand": "missing"},
        ... )
    """

    status_code = 400

    def __init__(
        self,
        message: str,
        calculator: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        invalid_fields: Optional[Dict[str, str]] = None,
    ):
        if invalid_fields:
            context = context or {}
            context["invalid_fields"] = invalid_fields
        super().__init__(message, calculator=calculator, context=context)

    @property
    def invalid_fields(self) -> Dict[str, str]:
        """Return the field-name to reason mapping, if any."""
        return self.context.get("invalid_fields", {})


class NotFoundError(CarbonImpactError):
    """An enumerated lookup key was not recognized.

    Raised by the renewable sizer for an unknown renewable source. The
    CCS and MCS calculators never raise it; they fall back to a default
    efficiency instead.
    """

    status_code = 404

    def __init__(
        self,
        message: str,
        calculator: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        key: Optional[str] = None,
        valid_keys: Optional[List[str]] = None,
    ):
        context = context or {}
        if key is not None:
            context["key"] = key
        if valid_keys is not None:
            context["valid_keys"] = list(valid_keys)
        super().__init__(message, calculator=calculator, context=context)


class PersistenceError(CarbonImpactError):
    """The calculation store rejected or failed a write.

    Example:
        >>> raise PersistenceError(
        ...     message="Failed to persist record",
        ...     collection="ccs_calculations",
        ...     cause=sqlite3.OperationalError("database is locked"),
        ... )
    """

    status_code = 500

    def __init__(
        self,
        message: str,
        calculator: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        collection: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        context = context or {}
        if collection:
            context["collection"] = collection
        if cause is not None:
            context["cause"] = str(cause)
            context["cause_type"] = type(cause).__name__
        super().__init__(message, calculator=calculator, context=context)


class ConfigurationError(CarbonImpactError):
    """Configuration values are invalid or inconsistent."""


__all__ = [
    "CarbonImpactError",
    "ValidationError",
    "NotFoundError",
    "PersistenceError",
    "ConfigurationError",
]
