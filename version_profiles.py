"""Known game builds for the shiny stash pointer lookup."""

# Mapping of version label to (build fingerprint, stash base offset)
VERSIONS = {
    "2.0.1": (
        "BC E5 D5 39 3B 5A A3 A8",
        0x610A710,
    ),
    "2.0.0": (
        "8A 1C 86 C4 37 39 4B 69",
        0x6105710,
    ),
    "1.0.3": (
        "17 9C 38 43 B9 84 F8 78",
        0x5F0E250,
    ),
}

# Offsets applied after each dereference, main NSO -> stash window
POINTER_CHAIN = (0x120, 0x168, 0x0)
