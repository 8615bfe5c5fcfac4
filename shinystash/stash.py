from __future__ import annotations

"""Read, decrypt and filter the shiny stash."""

import argparse
import logging
import struct
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple

from . import mem_offsets as mo
from .config import ScannerSettings, load_saved_settings, save_settings
from .crypto import decrypt_record, read_species
from .errors import (
    AllocationFailure,
    MemoryAccessError,
    MemoryReadFailure,
    ScanError,
    ScanStatus,
)
from .helpers import project_many, world_to_image
from .maps import MAPS, map_name
from .memory import MemoryBackend, SwitchMemory, SysBotMemory, memory_session
from .spawners import SpawnerCatalog, SpawnerLocation
from .species import SpeciesNames, to_national

import pointer_resolver as pr
from version_profiles import POINTER_CHAIN

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecodedEntry:
    hash: int
    species_internal: int
    national: int


@dataclass
class ScanResult:
    entries: List[DecodedEntry] = field(default_factory=list)
    status: ScanStatus = ScanStatus.EMPTY
    message: str = ""
    version: Optional[str] = None
    build_id: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is ScanStatus.OK


def iter_slots(window: bytes) -> Iterator[Tuple[int, bytes]]:
    """Yield ``(hash, encrypted record)`` per slot up to the first empty hash."""

    for off in range(0, len(window) - mo.ENTRY_SIZE + 1, mo.ENTRY_SIZE):
        hash_ = struct.unpack_from("<Q", window, off)[0]
        if hash_ == 0 or hash_ == mo.TERMINATOR_HASH:
            return
        start = off + mo.PA9_DATA_OFFSET
        yield hash_, window[start : start + mo.PA9_SIZE]


def decode_slots(window: bytes, catalog: SpawnerCatalog) -> List[DecodedEntry]:
    """Decode every occupied slot with a known spawn location.

    The first slot wins when a hash repeats.
    """

    entries: List[DecodedEntry] = []
    seen = set()
    for hash_, record in iter_slots(window):
        species = read_species(decrypt_record(record))
        if species == 0:
            continue
        if hash_ in seen:
            logger.debug("Duplicate slot %016X ignored", hash_)
            continue
        if hash_ not in catalog:
            logger.debug("No spawner for %016X (species %d)", hash_, species)
            continue
        seen.add(hash_)
        entries.append(DecodedEntry(hash_, species, to_national(species)))
    return entries


class StashScanner:
    """Runs one complete stash scan per :meth:`scan` call.

    ``result`` always holds the outcome of the latest scan; it is cleared when
    a scan starts and a failed scan leaves it empty.
    """

    def __init__(
        self,
        backend: MemoryBackend,
        catalog: SpawnerCatalog,
        profiles: Sequence[pr.VersionProfile] = pr.PROFILES,
        chain: Sequence[int] = POINTER_CHAIN,
    ) -> None:
        self.backend = backend
        self.catalog = catalog
        self.profiles = profiles
        self.chain = chain
        self.result = ScanResult(message="No scan yet")
        self._build_id: Optional[str] = None
        self._version: Optional[str] = None

    def scan(self) -> ScanResult:
        self.result = ScanResult(message="Reading...")
        self._build_id = None
        self._version = None
        try:
            entries = self._scan()
        except ScanError as exc:
            logger.warning("Scan failed: %s", exc)
            result = ScanResult(
                status=exc.status,
                message=str(exc),
                version=self._version,
                build_id=self._build_id or getattr(exc, "build_id", None),
            )
        else:
            if entries:
                status = ScanStatus.OK
                message = f"{len(entries)} shiny entries loaded (v{self._version})"
            else:
                status = ScanStatus.EMPTY
                message = "Shiny stash is empty"
            logger.info(message)
            result = ScanResult(entries, status, message, self._version, self._build_id)
        self.result = result
        return result

    def _scan(self) -> List[DecodedEntry]:
        with memory_session(self.backend) as mem:
            try:
                meta = mem.metadata()
            except MemoryAccessError as exc:
                raise MemoryReadFailure("Metadata read failed") from exc
            self._build_id = meta.build_id_hex
            profile = pr.select_profile(meta, self.profiles)
            self._version = profile.label
            logger.info("Game version %s (build %s)", profile.label, meta.build_id_hex)

            addr = pr.resolve_stash_address(mem, meta.main_base, profile, self.chain)
            logger.debug("Stash at 0x%X", addr)
            window = self._read_window(mem, addr)
        return decode_slots(window, self.catalog)

    @staticmethod
    def _read_window(mem: SwitchMemory, addr: int) -> bytes:
        try:
            return mem.read_bytes(addr, mo.STASH_SIZE)
        except MemoryError as exc:
            raise AllocationFailure("Out of memory reading stash") from exc
        except MemoryAccessError as exc:
            raise MemoryReadFailure("Stash read failed") from exc


# Presentation hand-off ----------------------------------------------------
@dataclass(frozen=True)
class EntryRow:
    species: str
    national: int
    hash_hex: str
    map_name: str
    location: str
    position: Tuple[float, float, float]
    texture: Tuple[float, float]
    pixel: Optional[Tuple[int, int]] = None


def describe_entry(
    entry: DecodedEntry,
    catalog: SpawnerCatalog,
    names: SpeciesNames,
    image_size: Optional[Tuple[int, int]] = None,
) -> Optional[EntryRow]:
    """Return display fields for ``entry`` or ``None`` if its spawner is gone.

    With ``image_size`` the row also carries the pixel position on a map image
    of that size, or ``None`` there when the spawner falls off the image.
    """

    loc = catalog.find(entry.hash)
    if loc is None:
        return None
    texture = (0.0, 0.0)
    pixel = None
    if 0 <= loc.map_index < len(MAPS):
        profile = MAPS[loc.map_index].profile
        texture = profile.project(loc.x, loc.z)
        if image_size is not None:
            pixel = world_to_image(profile, (loc.x, loc.y, loc.z), *image_size)
    return EntryRow(
        species=names.name(entry.national),
        national=entry.national,
        hash_hex=f"{entry.hash:016X}",
        map_name=map_name(loc.map_index),
        location=loc.name,
        position=(loc.x, loc.y, loc.z),
        texture=texture,
        pixel=pixel,
    )


@dataclass(frozen=True)
class SpawnerMarker:
    location: SpawnerLocation
    texture: Tuple[float, float]
    pixel: Optional[Tuple[int, int]] = None


def map_markers(
    catalog: SpawnerCatalog,
    map_index: int,
    image_size: Optional[Tuple[int, int]] = None,
) -> List[SpawnerMarker]:
    """Project every catalogued spawner on ``map_index`` onto its map texture."""

    if not 0 <= map_index < len(MAPS):
        raise ValueError(f"Unknown map index {map_index}")
    profile = MAPS[map_index].profile
    locations = catalog.on_map(map_index)
    textures = project_many(profile, [(l.x, l.y, l.z) for l in locations])
    markers = []
    for loc, (tex_x, tex_z) in zip(locations, textures):
        pixel = None
        if image_size is not None:
            pixel = world_to_image(profile, (loc.x, loc.y, loc.z), *image_size)
        markers.append(SpawnerMarker(loc, (float(tex_x), float(tex_z)), pixel))
    return markers


def _format_pixel(pixel: Optional[Tuple[int, int]]) -> str:
    return "off image" if pixel is None else f"px: ({pixel[0]}, {pixel[1]})"


def main(argv: list[str] | None = None) -> None:
    """Scan the shiny stash once and print the entries.

    Parameters
    ----------
    argv:
        Optional command line arguments.  ``--save`` stores the connection
        settings for the next run.
    """

    settings = load_saved_settings()
    parser = argparse.ArgumentParser(description="Legends: Z-A shiny stash reader")
    parser.add_argument("host", nargs="?", default=settings.host)
    parser.add_argument("--port", type=int, default=settings.port)
    parser.add_argument("--timeout", type=float, default=settings.timeout)
    parser.add_argument("--data-dir", default=settings.data_dir)
    parser.add_argument("--save", action="store_true", help="remember these settings")
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    parser.add_argument(
        "--image-size",
        type=int,
        nargs=2,
        metavar=("WIDTH", "HEIGHT"),
        help="also print pixel positions on a map image of this size",
    )
    parser.add_argument(
        "--map",
        type=int,
        choices=range(len(MAPS)),
        help="list the spawners of this map instead of scanning",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    image_size = tuple(args.image_size) if args.image_size else None

    if args.map is not None:
        catalog = SpawnerCatalog.load(args.data_dir)
        markers = map_markers(catalog, args.map, image_size)
        print(f"{map_name(args.map)}: {len(markers)} spawners")
        for marker in markers:
            loc = marker.location
            line = (
                f"{loc.name:<24} {loc.hash:016X}  "
                f"map: ({marker.texture[0]:.0f}, {marker.texture[1]:.0f})"
            )
            if image_size is not None:
                line += "  " + _format_pixel(marker.pixel)
            print(line)
        return

    if not args.host:
        parser.error("no console address given")
    settings = ScannerSettings(args.host, args.port, args.timeout, args.data_dir)
    if args.save:
        save_settings(settings)

    catalog = SpawnerCatalog.load(settings.data_dir)
    names = SpeciesNames.load(settings.data_dir)
    scanner = StashScanner(
        SysBotMemory(settings.host, settings.port, settings.timeout), catalog
    )
    result = scanner.scan()
    print(result.message)
    for entry in result.entries:
        row = describe_entry(entry, catalog, names, image_size)
        if row is None:
            continue
        x, y, z = row.position
        line = (
            f"{row.species:<16} #{row.national:04d}  {row.map_name:<14} "
            f"{row.location:<24} X: {x:.1f}  Y: {y:.1f}  Z: {z:.1f}  "
            f"map: ({row.texture[0]:.0f}, {row.texture[1]:.0f})  {row.hash_hex}"
        )
        if image_size is not None:
            line += "  " + _format_pixel(row.pixel)
        print(line)
    if not result.ok and result.status is not ScanStatus.EMPTY:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
