# group.py - Prime-order group used by the OT protocol (NIST P-256 via pycryptodome)
import logging
from typing import Callable, Optional

from Crypto.PublicKey import ECC
from Crypto.Random import get_random_bytes

from ..utils.error_handler import create_group_error, create_randomness_error

logger = logging.getLogger(__name__)

# A random source is any callable returning exactly n fresh random bytes
RandomSource = Callable[[int], bytes]

# FIPS 186-4, D.1.2.3; P256_P bounds x-coordinates accepted from the wire
P256_P = 0xffffffff00000001000000000000000000000000ffffffffffffffffffffffff
P256_ORDER = 0xffffffff00000000ffffffffffffffffbce6faada7179e84f3b9cac2fc632551
P256_GX = 0x6b17d1f2e12c4247f8bce6e563a440f277037d812deb33a0f4a13945d898c296
P256_GY = 0x4fe342e2fe1a7f9b8ee7eb4a7c0f9e162bce33576b315ececbb6406837bf51f5

COORDINATE_BYTES = 32
ELEMENT_BYTES = 1 + COORDINATE_BYTES
WIDE_SCALAR_BYTES = 64
INFINITY_ENCODING = b'\x00'


class P256Group:
    """
    NIST P-256 as a prime-order group (cofactor 1).

    Point arithmetic is delegated to pycryptodome's EccPoint. Elements travel
    as 33-byte SEC1 compressed encodings; the point at infinity is never
    accepted from the wire.
    """

    name = 'P-256'
    curve_name = 'p256'
    order = P256_ORDER
    element_bytes = ELEMENT_BYTES

    def __init__(self):
        self.generator = ECC.EccPoint(P256_GX, P256_GY, curve=self.curve_name)

    # --- Scalars -------------------------------------------------------------

    def random_scalar(self, random_source: Optional[RandomSource] = None) -> int:
        """
        Sample a scalar by reducing 64 random bytes modulo the group order.
        Reducing a buffer twice the size of the order keeps the modulo bias
        negligible. Any failure of the source is fatal for the run.
        """
        source = random_source or get_random_bytes
        try:
            buf = source(WIDE_SCALAR_BYTES)
        except Exception as e:
            raise create_randomness_error(f"Random source failed: {e}")

        if not isinstance(buf, (bytes, bytearray)) or len(buf) != WIDE_SCALAR_BYTES:
            raise create_randomness_error(
                "Random source returned an unexpected value",
                {'expected_length': WIDE_SCALAR_BYTES,
                 'received_length': len(buf) if hasattr(buf, '__len__') else None}
            )

        scalar = int.from_bytes(bytes(buf), 'little') % self.order
        if scalar == 0:
            raise create_randomness_error("Random source produced the zero scalar")
        return scalar

    # --- Point arithmetic ----------------------------------------------------

    def base_multiply(self, scalar: int) -> ECC.EccPoint:
        return self.generator * (scalar % self.order)

    def multiply(self, point: ECC.EccPoint, scalar: int) -> ECC.EccPoint:
        return point * (scalar % self.order)

    def add(self, p: ECC.EccPoint, q: ECC.EccPoint) -> ECC.EccPoint:
        return p + q

    def negate(self, point: ECC.EccPoint) -> ECC.EccPoint:
        return -point

    def subtract(self, p: ECC.EccPoint, q: ECC.EccPoint) -> ECC.EccPoint:
        return p + self.negate(q)

    # --- Encoding ------------------------------------------------------------

    def encode(self, point: ECC.EccPoint) -> bytes:
        """SEC1 compressed encoding; the point at infinity encodes as 0x00"""
        if point.is_point_at_infinity():
            return INFINITY_ENCODING
        key = ECC.EccKey(curve=self.name, point=point)
        return key.export_key(format='SEC1', compress=True)

    def decode(self, data: bytes) -> ECC.EccPoint:
        """
        Decode a 33-byte SEC1 compressed point received from the peer.
        Raises InvalidGroupElementError instead of producing an invalid point.
        """
        if not isinstance(data, (bytes, bytearray)):
            raise create_group_error(f"Group element must be bytes, got {type(data).__name__}")
        data = bytes(data)
        if len(data) != ELEMENT_BYTES:
            raise create_group_error(
                "Group element has the wrong length",
                {'expected_length': ELEMENT_BYTES, 'received_length': len(data)}
            )
        if data[0] not in (2, 3):
            raise create_group_error(
                "Group element is not a SEC1 compressed point",
                {'prefix': data[0]}
            )
        if int.from_bytes(data[1:], 'big') >= P256_P:
            raise create_group_error("Group element x-coordinate is out of range")

        try:
            return ECC.import_key(data, curve_name=self.name).pointQ
        except ValueError as e:
            raise create_group_error(f"Group element is not on the curve: {e}")


DEFAULT_GROUP = P256Group()
