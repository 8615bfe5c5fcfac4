"""PA9 record encryption: LCRNG XOR stream plus a four block shuffle.

The first 8 bytes of a record (encryption constant, sanity, checksum) are
stored in the clear. The remaining 336 bytes are XORed word by word with the
high half of a 32-bit LCRNG seeded with the encryption constant. The first
320 of them form four 80-byte blocks stored in an order picked by bits 13-17
of the encryption constant; the 16-byte tail is never shuffled.
"""

from __future__ import annotations

import struct

import numpy as np

from . import mem_offsets as mo

LCRNG_MULT = 0x41C64E6D
LCRNG_ADD = 0x00006073

HEADER_SIZE = 8
BLOCK_SIZE = 80
BLOCK_COUNT = 4

# Source block for each output block, indexed by shuffle value.
# Shuffle values 24-31 repeat rows 0-7.
BLOCK_POSITIONS = (
    (0, 1, 2, 3), (0, 1, 3, 2), (0, 2, 1, 3), (0, 3, 1, 2),
    (0, 2, 3, 1), (0, 3, 2, 1), (1, 0, 2, 3), (1, 0, 3, 2),
    (2, 0, 1, 3), (3, 0, 1, 2), (2, 0, 3, 1), (3, 0, 2, 1),
    (1, 2, 0, 3), (1, 3, 0, 2), (2, 1, 0, 3), (3, 1, 0, 2),
    (2, 3, 0, 1), (3, 2, 0, 1), (1, 2, 3, 0), (1, 3, 2, 0),
    (2, 1, 3, 0), (3, 1, 2, 0), (2, 3, 1, 0), (3, 2, 1, 0),
    (0, 1, 2, 3), (0, 1, 3, 2), (0, 2, 1, 3), (0, 3, 1, 2),
    (0, 2, 3, 1), (0, 3, 2, 1), (1, 0, 2, 3), (1, 0, 3, 2),
)


def encryption_constant(data: bytes) -> int:
    return struct.unpack_from("<I", data, 0)[0]


def shuffle_value(ec: int) -> int:
    return (ec >> 13) & 31


def key_stream(seed: int, count: int) -> np.ndarray:
    """Return ``count`` XOR words from the LCRNG seeded with ``seed``."""

    words = np.empty(count, dtype="<u2")
    for i in range(count):
        seed = (seed * LCRNG_MULT + LCRNG_ADD) & 0xFFFFFFFF
        words[i] = seed >> 16
    return words


def _crypt_payload(payload: np.ndarray, ec: int) -> None:
    words = payload.view("<u2")
    words ^= key_stream(ec, len(words))


def decrypt_record(data: bytes) -> bytes:
    """Return the cleartext form of an encrypted ``PA9_SIZE`` record."""

    if len(data) != mo.PA9_SIZE:
        raise ValueError(f"Expected {mo.PA9_SIZE} bytes, got {len(data)}")
    buf = np.frombuffer(data, dtype=np.uint8).copy()
    ec = encryption_constant(data)

    payload = buf[HEADER_SIZE:]
    _crypt_payload(payload, ec)

    blocks = payload[: BLOCK_COUNT * BLOCK_SIZE].reshape(BLOCK_COUNT, BLOCK_SIZE)
    order = list(BLOCK_POSITIONS[shuffle_value(ec)])
    blocks[:] = blocks[order]
    return buf.tobytes()


def encrypt_record(data: bytes) -> bytes:
    """Inverse of :func:`decrypt_record`: shuffle the blocks, then XOR."""

    if len(data) != mo.PA9_SIZE:
        raise ValueError(f"Expected {mo.PA9_SIZE} bytes, got {len(data)}")
    buf = np.frombuffer(data, dtype=np.uint8).copy()
    ec = encryption_constant(data)

    payload = buf[HEADER_SIZE:]
    blocks = payload[: BLOCK_COUNT * BLOCK_SIZE].reshape(BLOCK_COUNT, BLOCK_SIZE)
    order = list(BLOCK_POSITIONS[shuffle_value(ec)])
    shuffled = np.empty_like(blocks)
    shuffled[order] = blocks
    blocks[:] = shuffled

    _crypt_payload(payload, ec)
    return buf.tobytes()


def read_species(record: bytes) -> int:
    """Return the internal species id of a decrypted record."""

    return struct.unpack_from("<H", record, mo.PA9_SPECIES_OFFSET)[0]
