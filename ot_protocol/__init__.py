# Oblivious Transfer Implementation
"""
1-out-of-2 Oblivious Transfer (Bellare-Micali style) for Educational Purposes

A sender holds two messages; a receiver holds a choice bit and learns exactly
one of them. The sender learns nothing about the choice (under DDH in P-256)
and the receiver learns nothing about the other message. Security holds only
against semi-honest parties.

The payload cipher is a hash-chain keystream without authentication: a
teaching placeholder, not a production cipher.
"""

__version__ = "1.0.0"
__author__ = "Oblivious Transfer Educational Team"

from .core.oblivious_transfer import (
    OTSender, OTReceiver, SenderState, ReceiverState,
    SetupMessage, ChoiceMessage, TransferMessage, run_transfer
)
from .core.group import P256Group
from .security.keystream import derive_key, keystream_xor
from .config import ProtocolConfig
from .utils.message_handler import MessageHandler
from .utils.error_handler import ErrorHandler, ObliviousTransferError

__all__ = [
    'OTSender',
    'OTReceiver',
    'SenderState',
    'ReceiverState',
    'SetupMessage',
    'ChoiceMessage',
    'TransferMessage',
    'run_transfer',
    'P256Group',
    'derive_key',
    'keystream_xor',
    'ProtocolConfig',
    'MessageHandler',
    'ErrorHandler',
    'ObliviousTransferError',
]
