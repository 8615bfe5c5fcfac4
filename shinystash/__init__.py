"""Helper package for reading the Legends: Z-A shiny stash."""

from .memory import SnapshotMemory, SysBotMemory
from .spawners import SpawnerCatalog
from .species import SpeciesNames

__all__ = [
    "SnapshotMemory",
    "SysBotMemory",
    "SpawnerCatalog",
    "SpeciesNames",
    "StashScanner",
    "ScanResult",
]


def __getattr__(name):
    """Lazily import the scanner, which pulls in the root resolver module."""

    if name in {"StashScanner", "ScanResult"}:
        from .stash import ScanResult, StashScanner
        globals()["StashScanner"] = StashScanner
        globals()["ScanResult"] = ScanResult
        return globals()[name]
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
