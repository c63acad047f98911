"""
Structured error types for the implementors index.

Every failure the coordinator, the fragment codec, or the settings layer can
report is an ``ImplIndexError``. Errors carry a category for routing, an
``ErrorContext`` naming the fragment/key/path involved, and an optional
chained cause, so they can be logged as structured events instead of bare
strings.

Manifesto:
    - **Typed hierarchy:** one subclass per failure the host can act on
    - **Rich context:** errors know which fragment or key they concern
    - **Error chaining:** the original exception survives as ``cause``
    - **Never silent:** every error is raised *and* logged by its producer

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────┐
        │                     ImplIndexError                        │
        │           (category, context, cause)                      │
        ├──────────────────────────────────────────────────────────┤
        │  InvalidContributionError   InvalidConsumerError          │
        │  (VALIDATION)               (VALIDATION)                  │
        │                                                           │
        │  DuplicateConsumerError     ConsumerDeliveryError         │
        │  (REGISTRATION)             (DELIVERY)                    │
        │                                                           │
        │  FragmentFormatError        ConfigError                   │
        │  (PARSE)                    (CONFIG)                      │
        └──────────────────────────────────────────────────────────┘

Examples:
    >>> error = InvalidContributionError("keys must be strings")
    >>> error.with_context(fragment="trait.AsRawFd", key=3)
    InvalidContributionError('keys must be strings', category=VALIDATION)
    >>> error.to_dict()["context"]["fragment"]
    'trait.AsRawFd'

Tags:
    error-handling, exception-hierarchy, error-context, implindex

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    VALIDATION = "VALIDATION"
    REGISTRATION = "REGISTRATION"
    DELIVERY = "DELIVERY"
    PARSE = "PARSE"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        fragment: Name of the fragment being processed
        key: Registry key (package) involved
        path: Filesystem path of a fragment file
        metadata: Anything else worth logging
    """

    fragment: str | None = None
    key: Any = None
    path: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Return non-empty fields as a flat dict."""
        result: dict[str, Any] = {}
        if self.fragment is not None:
            result["fragment"] = self.fragment
        if self.key is not None:
            result["key"] = self.key
        if self.path is not None:
            result["path"] = self.path
        result.update(self.metadata)
        return result


class ImplIndexError(Exception):
    """
    Base exception for all implindex errors.

    Subclasses set ``default_category``; callers may override it per
    instance. Extra context can be attached after construction with
    :meth:`with_context`.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> ImplIndexError:
        """
        Add context to this error (fluent API).

        Usage:
            raise FragmentFormatError("no object literal").with_context(
                path="implementors/core/trait.Copy.js"
            )
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# COORDINATOR ERRORS
# =============================================================================


class InvalidContributionError(ImplIndexError):
    """A contribution is not a mapping (or pairs) of key to entry sequence."""

    default_category = ErrorCategory.VALIDATION


class InvalidConsumerError(ImplIndexError):
    """A consumer registration did not supply a callable."""

    default_category = ErrorCategory.VALIDATION


class DuplicateConsumerError(ImplIndexError):
    """A second consumer was registered while the reject policy is active."""

    default_category = ErrorCategory.REGISTRATION


class ConsumerDeliveryError(ImplIndexError):
    """The registered consumer raised while receiving the registry."""

    default_category = ErrorCategory.DELIVERY


# =============================================================================
# FRAGMENT / CONFIG ERRORS
# =============================================================================


class FragmentFormatError(ImplIndexError):
    """A fragment file does not have the implementors script shape."""

    default_category = ErrorCategory.PARSE


class ConfigError(ImplIndexError):
    """Settings failed validation."""

    default_category = ErrorCategory.CONFIG


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "ImplIndexError",
    "InvalidContributionError",
    "InvalidConsumerError",
    "DuplicateConsumerError",
    "ConsumerDeliveryError",
    "FragmentFormatError",
    "ConfigError",
]
