import struct

import numpy as np
import pytest

from shinystash import mem_offsets as mo
from shinystash.crypto import (
    BLOCK_POSITIONS,
    BLOCK_SIZE,
    HEADER_SIZE,
    decrypt_record,
    encrypt_record,
    key_stream,
    read_species,
    shuffle_value,
)


def _plaintext(ec):
    data = bytearray(i * 7 & 0xFF for i in range(mo.PA9_SIZE))
    struct.pack_into("<I", data, 0, ec)
    return bytes(data)


def test_round_trip_fixture_seed():
    plain = _plaintext(0x12345678)
    encrypted = encrypt_record(plain)
    assert encrypted != plain
    assert encrypted[:HEADER_SIZE] == plain[:HEADER_SIZE]
    assert decrypt_record(encrypted) == plain


@pytest.mark.parametrize("sv", range(32))
def test_round_trip_every_shuffle_value(sv):
    ec = (sv << 13) | 0x5A5
    assert shuffle_value(ec) == sv
    plain = _plaintext(ec)
    assert decrypt_record(encrypt_record(plain)) == plain


def test_shuffle_rows_24_to_31_repeat_first_rows():
    assert len(BLOCK_POSITIONS) == 32
    for sv in range(24, 32):
        assert BLOCK_POSITIONS[sv] == BLOCK_POSITIONS[sv - 24]


def test_every_row_is_a_permutation():
    for row in BLOCK_POSITIONS:
        assert sorted(row) == [0, 1, 2, 3]


def test_decrypt_unshuffles_after_xor():
    ec = 0x12345678
    assert shuffle_value(ec) == 2
    blocks = [bytes([0x10 * (b + 1)]) * BLOCK_SIZE for b in range(4)]
    order = BLOCK_POSITIONS[2]
    stored = [None] * 4
    for b, src in enumerate(order):
        stored[src] = blocks[b]
    tail = bytes(range(0xE0, 0xF0))
    payload = np.frombuffer(b"".join(stored) + tail, dtype="<u2") ^ key_stream(ec, 168)
    encrypted = struct.pack("<I", ec) + b"\x00" * 4 + payload.astype("<u2").tobytes()

    decrypted = decrypt_record(encrypted)
    shuffled_end = HEADER_SIZE + 4 * BLOCK_SIZE
    assert decrypted[HEADER_SIZE:shuffled_end] == b"".join(blocks)
    assert decrypted[shuffled_end:] == tail


@pytest.mark.parametrize("ec", [0x12345678, 0x0001E000])
def test_tail_stays_in_place(ec):
    plain = _plaintext(ec)
    encrypted = encrypt_record(plain)
    keys = key_stream(ec, 168)[-8:]
    tail = np.frombuffer(encrypted[-16:], dtype="<u2") ^ keys
    assert tail.astype("<u2").tobytes() == plain[-16:]


def test_key_stream_known_values():
    assert key_stream(0x12345678, 6).tolist() == [0x0B71, 0x84EA, 0xD98A, 0xF4E0, 0x2684, 0x9837]
    assert key_stream(0, 3).tolist() == [0x0000, 0xE97E, 0x5271]


def test_decrypt_known_record():
    # EC 0x12345678, first stored word 0x0B68 = species 25 ^ first key word
    encrypted = bytes.fromhex("78563412" "00000000" "680B") + bytes(mo.PA9_SIZE - 10)
    decrypted = decrypt_record(encrypted)
    assert read_species(decrypted) == 25
    assert decrypted[:8] == encrypted[:8]


def test_key_stream_is_seed_dependent():
    a = key_stream(1, 8)
    b = key_stream(2, 8)
    assert a.dtype == np.dtype("<u2")
    assert not np.array_equal(a, b)
    assert np.array_equal(key_stream(1, 4), a[:4])


def test_wrong_length_rejected():
    with pytest.raises(ValueError):
        decrypt_record(b"\x00" * 10)


def test_read_species(record_factory):
    assert read_species(decrypt_record(record_factory(925))) == 925
    assert read_species(decrypt_record(record_factory(0))) == 0
