"""
Error types for swap and pool-connection sequences.

Validation errors are raised before anything is sent to the transport.
Transport errors abort the remaining steps of the sequence they occur in.
"""

import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class SwapError(Exception):
    """Base exception for swap engine operations."""
    pass


class ValidationError(SwapError):
    """Raised when user input fails validation."""
    pass


class EmptyInput(ValidationError):
    """Neither the token field nor the unit field holds an amount."""

    def __init__(self, message: str = "No amount supplied for either side"):
        super().__init__(message)


class InvalidAmount(ValidationError):
    """Amount is not a non-negative number representable in base units."""

    def __init__(self, raw_amount: Any, reason: str = "not a non-negative number"):
        super().__init__(f"Invalid amount {raw_amount!r}: {reason}")
        self.raw_amount = raw_amount
        self.reason = reason


class TransportError(SwapError):
    """Raised when the transport fails to dispatch or settle a call."""

    def __init__(self, message: str, tx_hash: Optional[str] = None):
        super().__init__(message)
        self.tx_hash = tx_hash


class Rejected(TransportError):
    """The signer declined the call or the node refused it before broadcast."""
    pass


class TimedOut(TransportError):
    """A dispatched transaction did not reach the confirmation threshold in time."""
    pass


class Reverted(TransportError):
    """A dispatched transaction was mined but reverted."""
    pass


class InvalidTransition(SwapError):
    """Raised when an outcome is moved to a status it cannot reach."""
    pass


class ErrorHandler:
    """
    Centralized error handling for call sequences.

    Classifies failures and logs them with context. Sequences never retry,
    so classification only picks the log level and category label.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def classify_error(self, error: Exception) -> str:
        """
        Classify an error into a category for logging.

        Args:
            error: Exception to classify

        Returns:
            Error category string
        """
        if isinstance(error, ValidationError):
            return 'validation'
        if isinstance(error, Rejected):
            return 'rejected'
        if isinstance(error, TimedOut):
            return 'timeout'
        if isinstance(error, Reverted):
            return 'reverted'

        error_str = str(error).lower()

        if any(keyword in error_str for keyword in ['user rejected', 'denied', 'declined']):
            return 'rejected'
        if any(keyword in error_str for keyword in ['timeout', 'timed out']):
            return 'timeout'
        if any(keyword in error_str for keyword in ['revert', 'execution reverted', 'out of gas']):
            return 'reverted'
        if any(keyword in error_str for keyword in ['connection', 'network', 'dns']):
            return 'network'

        return 'unknown'

    def log_error(self, error: Exception, context: Dict[str, Any]):
        """
        Log error with appropriate level and context.

        Args:
            error: Exception to log
            context: Additional context for logging
        """
        error_category = self.classify_error(error)

        log_data = {
            'error_type': type(error).__name__,
            'error_category': error_category,
            'error_message': str(error),
            **context
        }

        if error_category == 'validation':
            self.logger.warning(f"Validation failed: {error}", extra=log_data)
        elif error_category == 'rejected':
            self.logger.warning(f"Call rejected: {error}", extra=log_data)
        elif error_category == 'reverted':
            self.logger.error(f"Transaction reverted: {error}", extra=log_data)
        else:
            self.logger.error(f"Call sequence failed: {error}", extra=log_data)
