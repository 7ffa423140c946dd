# config.py - Protocol configuration shared by both parties of a run
import logging
import os
from typing import Optional

from cryptography.hazmat.primitives import hashes

from .utils.error_handler import ObliviousTransferError, ErrorCode

SUPPORTED_CURVES = ('P-256',)
SUPPORTED_HASHES = {
    'SHA256': hashes.SHA256,
    'SHA512': hashes.SHA512,
}
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class ProtocolConfig:
    """Settings that sender and receiver must agree on before a run.

    length_hiding_block_size: when set (1-255 bytes), both plaintexts are
    PKCS7-padded to a multiple of this size before encryption so ciphertext
    lengths only reveal the number of blocks.
    """

    def __init__(self, curve: str = 'P-256', hash_name: str = 'SHA256',
                 length_hiding_block_size: Optional[int] = None,
                 log_level: str = 'WARNING'):
        if curve not in SUPPORTED_CURVES:
            raise ObliviousTransferError(
                ErrorCode.INVALID_PARAMETER,
                f"Unsupported curve {curve!r}; expected one of {list(SUPPORTED_CURVES)}"
            )
        if hash_name not in SUPPORTED_HASHES:
            raise ObliviousTransferError(
                ErrorCode.INVALID_PARAMETER,
                f"Unsupported hash {hash_name!r}; expected one of {sorted(SUPPORTED_HASHES)}"
            )
        if length_hiding_block_size is not None:
            if isinstance(length_hiding_block_size, bool) or not isinstance(length_hiding_block_size, int) \
                    or not 1 <= length_hiding_block_size <= 255:
                raise ObliviousTransferError(
                    ErrorCode.INVALID_PARAMETER,
                    f"length_hiding_block_size must be an int in 1..255, got {length_hiding_block_size!r}"
                )
        if not isinstance(logging.getLevelName(str(log_level).upper()), int):
            raise ObliviousTransferError(
                ErrorCode.INVALID_PARAMETER,
                f"Unknown log level {log_level!r}"
            )

        self.curve = curve
        self.hash_name = hash_name
        self.length_hiding_block_size = length_hiding_block_size
        self.log_level = str(log_level).upper()

    @classmethod
    def from_env(cls, environ=None) -> 'ProtocolConfig':
        """Build a config from OT_HASH, OT_LENGTH_HIDING_BLOCK and OT_LOG_LEVEL"""
        environ = os.environ if environ is None else environ

        block = environ.get('OT_LENGTH_HIDING_BLOCK', '').strip()
        if block:
            try:
                block_size = int(block)
            except ValueError:
                raise ObliviousTransferError(
                    ErrorCode.INVALID_PARAMETER,
                    f"OT_LENGTH_HIDING_BLOCK must be an integer, got {block!r}"
                )
        else:
            block_size = None

        return cls(
            hash_name=environ.get('OT_HASH', 'SHA256').strip().upper(),
            length_hiding_block_size=block_size,
            log_level=environ.get('OT_LOG_LEVEL', 'WARNING').strip(),
        )

    def hash_algorithm(self) -> hashes.HashAlgorithm:
        return SUPPORTED_HASHES[self.hash_name]()

    def __eq__(self, other):
        if not isinstance(other, ProtocolConfig):
            return NotImplemented
        return (self.curve, self.hash_name, self.length_hiding_block_size) == \
            (other.curve, other.hash_name, other.length_hiding_block_size)

    def __repr__(self):
        return (f"ProtocolConfig(curve={self.curve!r}, hash_name={self.hash_name!r}, "
                f"length_hiding_block_size={self.length_hiding_block_size!r}, "
                f"log_level={self.log_level!r})")


DEFAULT_CONFIG = ProtocolConfig()


def configure_logging(level: str = 'INFO'):
    """Install a root handler; meant for entry points, not for library code"""
    logging.basicConfig(level=getattr(logging, str(level).upper()), format=LOG_FORMAT)
