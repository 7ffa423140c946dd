# keystream.py - Point-to-key hashing and the hash-chain keystream cipher
"""
Key derivation and symmetric masking for the OT payloads.

WARNING: the keystream cipher below is a teaching placeholder. It is
deterministic for a given key and carries no authentication tag, so it only
protects confidentiality against a passive adversary. It is neither IND-CPA
nor IND-CCA secure and must not be reused outside this protocol. Anything
beyond a classroom exercise should replace it with an AEAD keyed by the
derived secret.
"""
from typing import Optional

from cryptography.hazmat.primitives import hashes, padding

from ..core.group import P256Group, DEFAULT_GROUP
from ..utils.error_handler import ErrorCode, create_crypto_error


def _digest(data: bytes, algorithm: Optional[hashes.HashAlgorithm] = None) -> bytes:
    h = hashes.Hash(algorithm or hashes.SHA256())
    h.update(data)
    return h.finalize()


def derive_key(point, group: P256Group = DEFAULT_GROUP,
               algorithm: Optional[hashes.HashAlgorithm] = None) -> bytes:
    """Hash a group element's compressed encoding into a symmetric key"""
    return _digest(group.encode(point), algorithm)


def generate_keystream(key: bytes, length: int,
                       algorithm: Optional[hashes.HashAlgorithm] = None) -> bytes:
    """
    Expand key into length bytes: block 1 = H(key), block i+1 = H(block i).
    """
    if length < 0:
        raise create_crypto_error(ErrorCode.INVALID_PARAMETER, "Keystream length cannot be negative")

    blocks = []
    produced = 0
    current = key
    while produced < length:
        current = _digest(current, algorithm)
        blocks.append(current)
        produced += len(current)
    return b''.join(blocks)[:length]


def keystream_xor(data: bytes, key: bytes,
                  algorithm: Optional[hashes.HashAlgorithm] = None) -> bytes:
    """XOR data with the keystream for key. Applying it twice restores data."""
    stream = generate_keystream(key, len(data), algorithm)
    return bytes(d ^ k for d, k in zip(data, stream))


keystream_encrypt = keystream_xor
keystream_decrypt = keystream_xor


# --- Optional length hiding -------------------------------------------------

def pad_message(message: bytes, block_size: int) -> bytes:
    """PKCS7-pad message to a multiple of block_size bytes"""
    padder = padding.PKCS7(block_size * 8).padder()
    return padder.update(message) + padder.finalize()


def unpad_message(padded: bytes, block_size: int) -> bytes:
    unpadder = padding.PKCS7(block_size * 8).unpadder()
    try:
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as e:
        raise create_crypto_error(
            ErrorCode.DECRYPTION_FAILED,
            "Padding check failed after decryption",
            {'reason': str(e), 'block_size': block_size}
        )
