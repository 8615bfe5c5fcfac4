import struct

import pytest

from shinystash import mem_offsets as mo
from shinystash.crypto import encrypt_record
from shinystash.memory import ProcessMetadata, SnapshotMemory

MAIN_BASE = 0x8000000
BUILD_201 = bytes.fromhex("BCE5D5393B5AA3A8")
STASH_BASE_201 = 0x610A710
CHAIN_TARGETS = (0x10000000, 0x20000000, 0x30000000)
STASH_ADDR = CHAIN_TARGETS[2]


def build_record(species, ec=0x12345678):
    plain = bytearray(mo.PA9_SIZE)
    struct.pack_into("<I", plain, 0, ec)
    struct.pack_into("<H", plain, mo.PA9_SPECIES_OFFSET, species)
    return encrypt_record(bytes(plain))


def build_window(slots):
    """``slots`` is a list of ``(hash, species)`` pairs starting at slot 0."""
    window = bytearray(mo.STASH_SIZE)
    for i, (hash_, species) in enumerate(slots):
        off = i * mo.ENTRY_SIZE
        struct.pack_into("<Q", window, off, hash_)
        start = off + mo.PA9_DATA_OFFSET
        window[start : start + mo.PA9_SIZE] = build_record(species, ec=0x12345678 + i)
    return bytes(window)


def build_snapshot(window=None, build_id=BUILD_201, title_id=mo.TITLE_ID):
    mem = SnapshotMemory(ProcessMetadata(title_id, build_id, MAIN_BASE))
    p1, p2, p3 = CHAIN_TARGETS
    mem.write_u64(MAIN_BASE + STASH_BASE_201, p1)
    mem.write_u64(p1 + 0x120, p2)
    mem.write_u64(p2 + 0x168, p3)
    if window is not None:
        mem.add_region(STASH_ADDR, window)
    return mem


@pytest.fixture
def record_factory():
    return build_record


@pytest.fixture
def window_factory():
    return build_window


@pytest.fixture
def snapshot_factory():
    return build_snapshot


@pytest.fixture
def layout():
    return {
        "main_base": MAIN_BASE,
        "build_id": BUILD_201,
        "stash_base": STASH_BASE_201,
        "stash_addr": STASH_ADDR,
    }
