"""Exception hierarchy for requiredparams.

All errors raised while correcting an operation's parameter list derive from
:class:`RequiredParamsError`, so generation pipelines can catch a single type.
"""

from typing import Any, Dict, Iterable, List, Optional


class RequiredParamsError(Exception):
    """Base class for all requiredparams errors.

    Attributes:
        message: Human readable error message
        details: Structured context for logging and diagnostics
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class UnresolvedParameterNameError(RequiredParamsError):
    """Raised when a documented parameter has no matching handler parameter."""

    def __init__(self, parameter_name: str, available_names: Iterable[str]):
        self.parameter_name = parameter_name
        self.available_names: List[str] = sorted(available_names)
        super().__init__(
            f"Documented parameter '{parameter_name}' does not match any handler "
            f"parameter (available: {', '.join(self.available_names) or 'none'})",
            details={
                "parameter_name": parameter_name,
                "available_names": self.available_names,
            },
        )


class AmbiguousCanonicalNameError(RequiredParamsError):
    """Raised when several handler parameters resolve to one canonical name
    and the resolver is configured to reject duplicates."""

    def __init__(self, canonical_name: str, declared_names: Iterable[str]):
        self.canonical_name = canonical_name
        self.declared_names: List[str] = list(declared_names)
        super().__init__(
            f"Canonical name '{canonical_name}' is claimed by several handler "
            f"parameters: {', '.join(self.declared_names)}",
            details={
                "canonical_name": canonical_name,
                "declared_names": self.declared_names,
            },
        )


__all__ = [
    "RequiredParamsError",
    "UnresolvedParameterNameError",
    "AmbiguousCanonicalNameError",
]
