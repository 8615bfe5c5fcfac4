"""Memory layout constants for the Legends: Z-A shiny stash."""

TITLE_ID = 0x0100F43008C44000

# Stash window
STASH_SIZE = 4960           # bytes read from the stash base
ENTRY_SIZE = 0x1F0          # one slot: hash(8) + PA9 record + padding
TERMINATOR_HASH = 0xCBF29CE484222645  # unused slot marker (FNV-1a offset basis)

# Slot offsets
PA9_DATA_OFFSET = 0x08      # slot -> encrypted PA9 record
PA9_SIZE = 0x158            # encrypted record length
PA9_SPECIES_OFFSET = 0x08   # decrypted record -> internal species u16
