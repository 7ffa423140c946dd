# oblivious_transfer.py - Bellare-Micali style 1-out-of-2 oblivious transfer
import logging
import struct
from typing import Optional, Tuple

from .group import P256Group, DEFAULT_GROUP, RandomSource
from ..config import ProtocolConfig, DEFAULT_CONFIG
from ..security.keystream import derive_key, keystream_xor, pad_message, unpad_message
from ..utils.error_handler import (
    ErrorHandler, ErrorCode, create_message_error
)

logger = logging.getLogger(__name__)

LENGTH_PREFIX = struct.Struct('>I')


# --- Messages ---------------------------------------------------------------

class SetupMessage:
    """Sender -> Receiver: the sender's public element A = a*G"""
    MESSAGE_TYPE = 1

    def __init__(self, sender_public_element):
        self.sender_public_element = sender_public_element

    def to_bytes(self, group: P256Group = DEFAULT_GROUP) -> bytes:
        return group.encode(self.sender_public_element)

    @classmethod
    def from_bytes(cls, data: bytes, group: P256Group = DEFAULT_GROUP) -> 'SetupMessage':
        return cls(group.decode(data))


class ChoiceMessage:
    """Receiver -> Sender: the receiver's public element B"""
    MESSAGE_TYPE = 2

    def __init__(self, receiver_public_element):
        self.receiver_public_element = receiver_public_element

    def to_bytes(self, group: P256Group = DEFAULT_GROUP) -> bytes:
        return group.encode(self.receiver_public_element)

    @classmethod
    def from_bytes(cls, data: bytes, group: P256Group = DEFAULT_GROUP) -> 'ChoiceMessage':
        return cls(group.decode(data))


class TransferMessage:
    """
    Sender -> Receiver: both ciphertexts.

    Binary framing: u32_be(len(c0)) || c0 || u32_be(len(c1)) || c1
    """
    MESSAGE_TYPE = 3

    def __init__(self, ciphertext0: bytes, ciphertext1: bytes):
        self.ciphertext0 = bytes(ciphertext0)
        self.ciphertext1 = bytes(ciphertext1)

    def ciphertext(self, index: int) -> bytes:
        return self.ciphertext1 if index else self.ciphertext0

    def to_bytes(self) -> bytes:
        return (LENGTH_PREFIX.pack(len(self.ciphertext0)) + self.ciphertext0 +
                LENGTH_PREFIX.pack(len(self.ciphertext1)) + self.ciphertext1)

    @classmethod
    def from_bytes(cls, data: bytes) -> 'TransferMessage':
        if not isinstance(data, (bytes, bytearray)):
            raise create_message_error(
                ErrorCode.MESSAGE_FORMAT_INVALID,
                f"Transfer message must be bytes, got {type(data).__name__}"
            )
        data = bytes(data)
        fields = []
        offset = 0
        for index in range(2):
            if len(data) - offset < LENGTH_PREFIX.size:
                raise create_message_error(
                    ErrorCode.MESSAGE_FORMAT_INVALID,
                    f"Transfer message truncated before length of ciphertext{index}"
                )
            (length,) = LENGTH_PREFIX.unpack_from(data, offset)
            offset += LENGTH_PREFIX.size
            if len(data) - offset < length:
                raise create_message_error(
                    ErrorCode.MESSAGE_FORMAT_INVALID,
                    f"Transfer message truncated inside ciphertext{index}",
                    {'declared_length': length, 'available': len(data) - offset}
                )
            fields.append(data[offset:offset + length])
            offset += length
        if offset != len(data):
            raise create_message_error(
                ErrorCode.MESSAGE_FORMAT_INVALID,
                "Trailing bytes after transfer message",
                {'trailing': len(data) - offset}
            )
        return cls(fields[0], fields[1])


# --- Per-run state ----------------------------------------------------------

class SenderState:
    """Sender's private state for a single run. Never persisted or reused."""

    def __init__(self, private_scalar: int, public_element):
        self._private_scalar = private_scalar
        self._public_element = public_element

    @property
    def public_element(self):
        return self._public_element

    def __repr__(self):
        return "SenderState(private_scalar=<redacted>)"


class ReceiverState:
    """Receiver's private state for a single run, including the choice bit."""

    def __init__(self, choice: bool, private_scalar: int, public_element):
        self._choice = choice
        self._private_scalar = private_scalar
        self._public_element = public_element

    @property
    def choice(self) -> bool:
        return self._choice

    @property
    def public_element(self):
        return self._public_element

    def __repr__(self):
        return "ReceiverState(choice=<redacted>, private_scalar=<redacted>)"


# --- Roles ------------------------------------------------------------------

class OTSender:
    """Alice: holds m0 and m1 and learns nothing about the receiver's choice"""

    def __init__(self, random_source: Optional[RandomSource] = None,
                 config: Optional[ProtocolConfig] = None,
                 group: Optional[P256Group] = None,
                 error_handler: Optional[ErrorHandler] = None):
        self.random_source = random_source
        self.config = config or DEFAULT_CONFIG
        self.group = group or DEFAULT_GROUP
        self.error_handler = error_handler or ErrorHandler()

    def init(self) -> Tuple[SenderState, SetupMessage]:
        private_scalar = self.group.random_scalar(self.random_source)
        public_element = self.group.base_multiply(private_scalar)
        logger.debug("Sender initialised a new run")
        return SenderState(private_scalar, public_element), SetupMessage(public_element)

    def encrypt(self, state: SenderState, msg2: ChoiceMessage,
                m0: bytes, m1: bytes) -> TransferMessage:
        """
        k0 = a*B matches the receiver's key when it chose 0.
        k1 = a*(B - A) matches when it chose 1, since the receiver then sent
        B = b*G + A and subtracting A leaves a*b*G.
        """
        self.error_handler.validate_parameter('state', state, SenderState)
        self.error_handler.validate_parameter('msg2', msg2, ChoiceMessage)
        self.error_handler.validate_parameter('m0', m0, (bytes, bytearray))
        self.error_handler.validate_parameter('m1', m1, (bytes, bytearray))

        a = state._private_scalar
        b_point = msg2.receiver_public_element

        secret0 = self.group.multiply(b_point, a)
        secret1 = self.group.multiply(self.group.subtract(b_point, state.public_element), a)

        algorithm = self.config.hash_algorithm()
        key0 = derive_key(secret0, self.group, algorithm)
        key1 = derive_key(secret1, self.group, algorithm)

        block_size = self.config.length_hiding_block_size
        if block_size:
            m0 = pad_message(bytes(m0), block_size)
            m1 = pad_message(bytes(m1), block_size)

        msg3 = TransferMessage(keystream_xor(bytes(m0), key0, algorithm),
                               keystream_xor(bytes(m1), key1, algorithm))
        logger.debug("Sender encrypted payloads of %d and %d bytes",
                     len(msg3.ciphertext0), len(msg3.ciphertext1))
        return msg3


class OTReceiver:
    """Bob: holds the choice bit and recovers exactly one message"""

    def __init__(self, random_source: Optional[RandomSource] = None,
                 config: Optional[ProtocolConfig] = None,
                 group: Optional[P256Group] = None,
                 error_handler: Optional[ErrorHandler] = None):
        self.random_source = random_source
        self.config = config or DEFAULT_CONFIG
        self.group = group or DEFAULT_GROUP
        self.error_handler = error_handler or ErrorHandler()

    def init(self, choice, msg1: SetupMessage) -> Tuple[ReceiverState, ChoiceMessage]:
        self.error_handler.validate_parameter('choice', choice, (bool, int), allowed_values=[0, 1])
        self.error_handler.validate_parameter('msg1', msg1, SetupMessage)
        choice = bool(choice)

        private_scalar = self.group.random_scalar(self.random_source)
        public_element = self.group.base_multiply(private_scalar)
        if choice:
            public_element = self.group.add(public_element, msg1.sender_public_element)

        logger.debug("Receiver initialised a new run")
        return ReceiverState(choice, private_scalar, public_element), ChoiceMessage(public_element)

    def derive_key(self, state: ReceiverState, msg1: SetupMessage) -> bytes:
        """The only key this receiver can compute: H(b*A)"""
        secret = self.group.multiply(msg1.sender_public_element, state._private_scalar)
        return derive_key(secret, self.group, self.config.hash_algorithm())

    def decrypt(self, state: ReceiverState, msg3: TransferMessage, msg1: SetupMessage) -> bytes:
        """
        Recover the chosen message. Nothing detects decryption of the other
        index; with the wrong key the output is simply garbage.
        """
        self.error_handler.validate_parameter('state', state, ReceiverState)
        self.error_handler.validate_parameter('msg3', msg3, TransferMessage)
        self.error_handler.validate_parameter('msg1', msg1, SetupMessage)

        key = self.derive_key(state, msg1)
        plaintext = keystream_xor(msg3.ciphertext(state.choice), key, self.config.hash_algorithm())

        block_size = self.config.length_hiding_block_size
        if block_size:
            plaintext = unpad_message(plaintext, block_size)
        logger.debug("Receiver recovered a %d byte payload", len(plaintext))
        return plaintext


def run_transfer(m0: bytes, m1: bytes, choice,
                 config: Optional[ProtocolConfig] = None,
                 sender_random: Optional[RandomSource] = None,
                 receiver_random: Optional[RandomSource] = None) -> bytes:
    """Run init -> init -> encrypt -> decrypt in one process and return the received message"""
    sender = OTSender(random_source=sender_random, config=config)
    receiver = OTReceiver(random_source=receiver_random, config=config)

    sender_state, msg1 = sender.init()
    receiver_state, msg2 = receiver.init(choice, msg1)
    msg3 = sender.encrypt(sender_state, msg2, m0, m1)
    return receiver.decrypt(receiver_state, msg3, msg1)


__all__ = [
    'SetupMessage', 'ChoiceMessage', 'TransferMessage',
    'SenderState', 'ReceiverState', 'OTSender', 'OTReceiver',
    'run_transfer',
]
