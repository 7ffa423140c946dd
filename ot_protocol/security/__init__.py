# Security Module
"""
Point-to-key hashing and the keystream cipher used to mask OT payloads.
"""

from .keystream import derive_key, keystream_xor, keystream_encrypt, keystream_decrypt

__all__ = ['derive_key', 'keystream_xor', 'keystream_encrypt', 'keystream_decrypt']
