# Utilities Module
"""
Error handling and message envelopes.

message_handler is not imported here because it depends on core, which in
turn depends on error_handler.
"""

from .error_handler import ErrorHandler, ErrorCode, ObliviousTransferError

__all__ = ['ErrorHandler', 'ErrorCode', 'ObliviousTransferError']
