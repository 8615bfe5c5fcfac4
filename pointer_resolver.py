"""Locate the shiny stash in a running Legends: Z-A process."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import Dict, Iterable, Sequence, Tuple
import logging

from shinystash import mem_offsets as mo
from shinystash.errors import MemoryAccessError, MemoryReadFailure, UnsupportedVersion
from shinystash.memory import DEFAULT_PORT, ProcessMetadata, SwitchMemory, SysBotMemory, memory_session

from version_profiles import POINTER_CHAIN, VERSIONS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VersionProfile:
    """A supported game build and where its stash pointer lives."""

    label: str
    build_id: bytes
    stash_base: int

    @classmethod
    def from_pattern(cls, label: str, pattern: str, stash_base: int) -> "VersionProfile":
        return cls(label, bytes(int(tok, 16) for tok in pattern.split()), stash_base)


def load_profiles(versions: Dict[str, Tuple[str, int]] = VERSIONS) -> Tuple[VersionProfile, ...]:
    return tuple(
        VersionProfile.from_pattern(label, pattern, base)
        for label, (pattern, base) in versions.items()
    )


PROFILES = load_profiles()


def select_profile(
    metadata: ProcessMetadata,
    profiles: Iterable[VersionProfile] = PROFILES,
    title_id: int = mo.TITLE_ID,
) -> VersionProfile:
    """Return the profile whose build fingerprint matches ``metadata``."""

    if metadata.title_id != title_id:
        raise UnsupportedVersion("Pokemon Legends: Z-A is not running", metadata.build_id_hex)
    for profile in profiles:
        if profile.build_id == metadata.build_id[:8]:
            return profile
    logger.warning("Unknown build id %s", metadata.build_id_hex)
    raise UnsupportedVersion("Unsupported game version", metadata.build_id_hex)


def resolve_stash_address(
    mem: SwitchMemory,
    main_base: int,
    profile: VersionProfile,
    chain: Sequence[int] = POINTER_CHAIN,
) -> int:
    """Follow ``chain`` from ``main_base + profile.stash_base``.

    Every step dereferences the current address and adds the step offset.
    """

    addr = main_base + profile.stash_base
    for step, offset in enumerate(chain):
        try:
            value = mem.read_u64(addr)
        except MemoryAccessError as exc:
            logger.debug("Pointer step %d at 0x%X failed: %s", step, addr, exc)
            raise MemoryReadFailure("Pointer resolve failed") from exc
        addr = value + offset
        logger.debug("Pointer step %d -> 0x%X", step, addr)
    return addr


def main(argv: list[str] | None = None) -> None:
    """Print the detected version and stash address."""

    parser = argparse.ArgumentParser(description="Resolve the shiny stash address")
    parser.add_argument("host", help="console address running sys-botbase")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    with memory_session(SysBotMemory(args.host, args.port)) as mem:
        meta = mem.metadata()
        print(f"build_id: {meta.build_id_hex}")
        profile = select_profile(meta)
        print(f"version: {profile.label}")
        print(f"main_base: 0x{meta.main_base:X}")
        print(f"stash: 0x{resolve_stash_address(mem, meta.main_base, profile):X}")


if __name__ == "__main__":
    main()
