"""Core primitives shared by every implindex module: errors, logging, settings."""

from implindex.core.errors import (
    ConfigError,
    ConsumerDeliveryError,
    DuplicateConsumerError,
    ErrorCategory,
    ErrorContext,
    FragmentFormatError,
    ImplIndexError,
    InvalidConsumerError,
    InvalidContributionError,
)
from implindex.core.logging import LogContext, configure_logging, get_logger
from implindex.core.settings import ConsumerPolicy, IndexSettings, get_settings

__all__ = [
    "ConfigError",
    "ConsumerDeliveryError",
    "ConsumerPolicy",
    "DuplicateConsumerError",
    "ErrorCategory",
    "ErrorContext",
    "FragmentFormatError",
    "ImplIndexError",
    "IndexSettings",
    "InvalidConsumerError",
    "InvalidContributionError",
    "LogContext",
    "configure_logging",
    "get_logger",
    "get_settings",
]
