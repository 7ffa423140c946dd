# error_handler.py - Error taxonomy and centralized error handling for OT runs
import logging
import traceback
from enum import Enum
from typing import Optional, Dict, Any, Tuple, Union

logger = logging.getLogger('ot_protocol.errors')


class ErrorCode(Enum):
    # Cryptographic errors
    RANDOMNESS_FAILED = "RNG_001"
    DECRYPTION_FAILED = "DEC_001"

    # Group element errors
    INVALID_GROUP_ELEMENT = "GRP_001"

    # Message errors
    MESSAGE_FORMAT_INVALID = "MSG_001"
    MESSAGE_TYPE_UNEXPECTED = "MSG_002"
    MESSAGE_VERSION_UNSUPPORTED = "MSG_003"
    MESSAGE_SESSION_MISMATCH = "MSG_004"

    # General errors
    INVALID_PARAMETER = "GEN_001"


class ObliviousTransferError(Exception):
    """Base exception for oblivious transfer operations"""
    def __init__(self, error_code: ErrorCode, message: str, details: Optional[Dict[str, Any]] = None):
        self.error_code = error_code
        self.message = message
        self.details = details or {}
        super().__init__(f"{error_code.value}: {message}")


class CryptographicError(ObliviousTransferError):
    """Errors related to cryptographic operations"""
    pass


class RandomnessError(CryptographicError):
    """The random source failed. Fatal for the run, never retried."""
    pass


class MessageError(ObliviousTransferError):
    """Errors related to protocol messages and their framing"""
    pass


class InvalidGroupElementError(MessageError):
    """Received bytes do not decode to a valid group element"""
    pass


class ErrorHandler:
    """Centralized error handling for protocol runs.

    There is deliberately no retry helper here: a failed run is abandoned and
    the caller starts over from ``init`` with fresh randomness.
    """

    def __init__(self, enable_logging=True):
        self.enable_logging = enable_logging
        self.error_stats = {}
        self.logger = logger

    def handle_error(self, error: Exception, context: str = "",
                     recovery_action: Optional[str] = None) -> Dict[str, Any]:
        """
        Log an error and return a dictionary describing it
        """
        error_info = {
            'context': context,
            'error_type': type(error).__name__,
            'error_message': str(error),
            'recovery_action': recovery_action,
            'traceback': traceback.format_exc() if self.enable_logging else None
        }

        if isinstance(error, ObliviousTransferError):
            error_info['error_code'] = error.error_code.value
            error_info['details'] = error.details

        error_type = type(error).__name__
        self.error_stats[error_type] = self.error_stats.get(error_type, 0) + 1

        if self.enable_logging:
            log_message = f"Error in {context}: {error_info['error_message']}"
            if recovery_action:
                log_message += f" | Recovery: {recovery_action}"
            self.logger.error(log_message)

            if isinstance(error, ObliviousTransferError) and error.details:
                self.logger.error(f"Error details: {error.details}")

        return error_info

    def safe_execute(self, operation, *args, **kwargs) -> Tuple[bool, Any, Optional[Dict[str, Any]]]:
        """
        Execute an operation once, capturing any error.
        Returns (success: bool, result: Any, error_info: Dict)
        """
        try:
            result = operation(*args, **kwargs)
            return True, result, None
        except Exception as e:
            error_info = self.handle_error(
                e,
                context=getattr(operation, '__name__', repr(operation)),
                recovery_action=self.create_recovery_suggestion(e)
            )
            return False, None, error_info

    def validate_parameter(self, param_name: str, param_value: Any,
                           expected_type: Optional[Union[type, Tuple[type, ...]]] = None,
                           allowed_values: Optional[list] = None) -> None:
        """
        Validate a caller-supplied parameter and raise ObliviousTransferError if invalid
        """
        if param_value is None:
            raise ObliviousTransferError(
                ErrorCode.INVALID_PARAMETER,
                f"Parameter {param_name} cannot be None"
            )

        if expected_type and not isinstance(param_value, expected_type):
            if isinstance(expected_type, tuple):
                type_name = " or ".join(t.__name__ for t in expected_type)
            else:
                type_name = expected_type.__name__
            raise ObliviousTransferError(
                ErrorCode.INVALID_PARAMETER,
                f"Parameter {param_name} must be of type {type_name}, got {type(param_value).__name__}"
            )

        if allowed_values is not None and param_value not in allowed_values:
            raise ObliviousTransferError(
                ErrorCode.INVALID_PARAMETER,
                f"Parameter {param_name} must be one of {allowed_values}, got {param_value!r}"
            )

    def create_recovery_suggestion(self, error: Exception) -> str:
        """
        Provide a recovery suggestion based on the error type
        """
        if isinstance(error, RandomnessError):
            return "Abort the run; the random source must be repaired before starting a new run"

        if isinstance(error, InvalidGroupElementError):
            return "Reject the peer message and restart the run from init"

        if isinstance(error, MessageError):
            if error.error_code == ErrorCode.MESSAGE_VERSION_UNSUPPORTED:
                return "Upgrade the peer to a matching protocol version"
            return "Discard the message and restart the run from init"

        if isinstance(error, CryptographicError):
            if error.error_code == ErrorCode.DECRYPTION_FAILED:
                return "Check that both parties share the same configuration, then restart the run"
            return "Restart the run from init with fresh randomness"

        if isinstance(error, ObliviousTransferError):
            if error.error_code == ErrorCode.INVALID_PARAMETER:
                return "Fix the caller-supplied parameter"

        return "Restart the run from init with fresh randomness"

    def get_error_statistics(self) -> Dict[str, Any]:
        """
        Get error statistics for monitoring and debugging
        """
        total_errors = sum(self.error_stats.values())
        return {
            'total_errors': total_errors,
            'error_counts': self.error_stats.copy(),
            'error_rates': {
                error_type: count / total_errors * 100
                for error_type, count in self.error_stats.items()
            } if total_errors > 0 else {}
        }

    def reset_statistics(self):
        """Reset error statistics"""
        self.error_stats.clear()


# Convenience functions for common error scenarios
def create_crypto_error(error_code: ErrorCode, message: str, details: Optional[Dict] = None) -> CryptographicError:
    return CryptographicError(error_code, message, details)


def create_message_error(error_code: ErrorCode, message: str, details: Optional[Dict] = None) -> MessageError:
    return MessageError(error_code, message, details)


def create_randomness_error(message: str, details: Optional[Dict] = None) -> RandomnessError:
    return RandomnessError(ErrorCode.RANDOMNESS_FAILED, message, details)


def create_group_error(message: str, details: Optional[Dict] = None) -> InvalidGroupElementError:
    return InvalidGroupElementError(ErrorCode.INVALID_GROUP_ELEMENT, message, details)
