"""PlanShift Custom Exception Hierarchy.

This module provides the exception hierarchy for PlanShift with rich error
context for debugging, monitoring, and user feedback.

Exception Hierarchy:
    PlanShiftException (base)
    ├── EngineException
    │   ├── CategoryResolutionError
    │   ├── UnknownPlanTierError
    │   └── ConfigurationError
    └── DataException
        └── InvalidFactsError

All exceptions include rich context:
- error_code: Unique error identifier
- context: Dictionary with error-specific details
- timestamp: When the error occurred

Example:
    >>> from planshift.exceptions import UnknownPlanTierError
    >>> raise UnknownPlanTierError(
    ...     message="Unknown plan tier: GOLD",
    ...     context={"tier": "GOLD", "valid_tiers": ["FREE", "PRO_SMALL"]}
    ... )

Author: PlanShift Team
Status: Production Ready
"""

import json
import re
from datetime import datetime
from typing import Any, Dict, Optional


# ==============================================================================
# Base Exception
# ==============================================================================

class PlanShiftException(Exception):
    """Base exception for all PlanShift errors.

    Attributes:
        message: Human-readable error message
        error_code: Unique error identifier (e.g., "PS_ENGINE_UNKNOWN_PLAN_TIER_ERROR")
        context: Dictionary with error-specific details
        timestamp: When the error occurred
    """

    ERROR_PREFIX = "PS"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """Initialize PlanShift exception with rich context.

        Args:
            message: Human-readable error message
            error_code: Unique error identifier (auto-generated if not provided)
            context: Dictionary with error-specific details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self._generate_error_code()
        self.context = context or {}
        self.timestamp = datetime.now()

    def _generate_error_code(self) -> str:
        """Generate error code based on exception class.

        Returns:
            Error code like "PS_ENGINE_CATEGORY_RESOLUTION_ERROR"
        """
        class_name = self.__class__.__name__
        error_type = re.sub(r'(?<!^)(?=[A-Z])', '_', class_name).upper()
        return f"{self.ERROR_PREFIX}_{error_type}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization.

        Returns:
            Dictionary with all error details
        """
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }

    def to_json(self) -> str:
        """Convert exception to JSON string."""
        return json.dumps(self.to_dict(), indent=2, default=str)

    def __str__(self) -> str:
        """String representation with error code and message."""
        return f"[{self.error_code}] - {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message='{self.message}', "
            f"error_code='{self.error_code}')"
        )


# ==============================================================================
# Engine Exceptions
# ==============================================================================

class EngineException(PlanShiftException):
    """Base exception for recommendation engine errors."""
    ERROR_PREFIX = "PS_ENGINE"


class CategoryResolutionError(EngineException):
    """The user category of an organization could not be resolved.

    Raised when no organization record exists for the requested id.

    Example:
        >>> raise CategoryResolutionError(
        ...     message="No organization record for org-42",
        ...     organization_id="org-42",
        ... )
    """

    def __init__(
        self,
        message: str,
        organization_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        context = context or {}
        if organization_id is not None:
            context["organization_id"] = organization_id
        super().__init__(message, context=context)
        self.organization_id = organization_id


class UnknownPlanTierError(EngineException):
    """Requested plan tier is not part of the pricing catalog."""

    def __init__(
        self,
        message: str,
        tier: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        context = context or {}
        if tier is not None:
            context["tier"] = tier
        super().__init__(message, context=context)
        self.tier = tier


class ConfigurationError(EngineException):
    """Static engine configuration is inconsistent.

    Raised at construction time, e.g. when scoring weights do not sum to 1
    or a plan tier has no catalog entry.
    """


# ==============================================================================
# Data Exceptions
# ==============================================================================

class DataException(PlanShiftException):
    """Base exception for input data errors."""
    ERROR_PREFIX = "PS_DATA"


class InvalidFactsError(DataException):
    """Stored facts could not be decoded.

    Example:
        >>> raise InvalidFactsError(
        ...     message="Feature payload must be a JSON object",
        ...     context={"payload_type": "list"}
        ... )
    """


__all__ = [
    "PlanShiftException",
    "EngineException",
    "CategoryResolutionError",
    "UnknownPlanTierError",
    "ConfigurationError",
    "DataException",
    "InvalidFactsError",
]
