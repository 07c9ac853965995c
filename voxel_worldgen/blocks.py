# voxel_worldgen/blocks.py

"""
================================================================================
BLOCK CODES AND THE VOXEL MAP
================================================================================
Generation works on a dense uint8 array of semantic block codes indexed
[z, y, x]. Only at the very end are the codes resolved to the externally
supplied block-type IDs through a BlockTypeTable (a mapping of semantic name
to integer ID).

Data Contract:
---------------
- Inputs:
    - codes (np.ndarray): uint8 array of shape (length, max_height, width).
    - block_types (Mapping[str, int]): Semantic block name -> external ID.
- Outputs:
    - VoxelMap: a read-only mapping from world (x, y, z) to block-type ID.
- Side Effects: None.
- Invariants: Code 0 is air and never appears in the external view. World
  coordinates are centred: x in [-(w // 2), w - w // 2 - 1], likewise for z,
  and y in [0, max_height - 1].
================================================================================
"""

from collections.abc import Mapping

import numpy as np

# --- Semantic Block Codes ---
AIR = 0
STONE = 1
DIRT = 2
GRASS = 3
SAND = 4
SAND_LIGHT = 5
SNOW = 6
GRAVEL = 7
CLAY = 8
CACTUS = 9
SANDSTONE = 10
LAVA = 11
WATER = 12
COAL = 13
IRON = 14
GOLD = 15
EMERALD = 16
DIAMOND = 17
LOG = 18
POPLAR_LOG = 19
OAK_LEAVES = 20
COLD_LEAVES = 21
COBBLESTONE = 22

# Indexed by code. These are the keys a BlockTypeTable must supply.
BLOCK_NAMES = (
    "air",
    "stone",
    "dirt",
    "grass",
    "sand",
    "sand-light",
    "snow",
    "gravel",
    "clay",
    "cactus",
    "sandstone",
    "lava",
    "water-still",
    "coal",
    "iron",
    "gold",
    "emerald",
    "diamond",
    "log",
    "poplar log",
    "oak-leaves",
    "cold-leaves",
    "cobblestone",
)
SEMANTIC_BLOCK_NAMES = BLOCK_NAMES[1:]
BLOCK_CODES = {name: code for code, name in enumerate(BLOCK_NAMES)}

ORE_CODES = (COAL, IRON, GOLD, EMERALD, DIAMOND)
SAND_CODES = (SAND, SAND_LIGHT)

# Registry names tried, in order, for each semantic name. Registries name
# ores and water differently from the generator.
REGISTRY_LOOKUP_NAMES = {
    "water-still": ("water",),
    "coal": ("coal-ore", "coal"),
    "iron": ("iron-ore", "iron"),
    "gold": ("gold-ore", "gold"),
    "emerald": ("emerald-ore", "emerald"),
    "diamond": ("diamond-ore", "diamond"),
    "snow": ("snow", "snow-block", "white-wool"),
}


def _find_registry_id(entries, lookup_name):
    """Exact (case-insensitive) name match first, then the first substring match."""
    target = lookup_name.lower()
    for entry in entries:
        if str(entry.get("name", "")).lower() == target:
            return entry["id"]
    for entry in entries:
        if target in str(entry.get("name", "")).lower():
            return entry["id"]
    return None


def block_types_from_registry(entries) -> dict:
    """
    Builds a BlockTypeTable from a block registry listing, a sequence of
    {'id': int, 'name': str} records. Names the registry cannot satisfy are
    left out of the table.
    """
    entries = list(entries)
    table = {}
    for name in SEMANTIC_BLOCK_NAMES:
        for lookup_name in REGISTRY_LOOKUP_NAMES.get(name, (name,)):
            block_id = _find_registry_id(entries, lookup_name)
            if block_id is not None:
                table[name] = int(block_id)
                break
    return table


def missing_block_names(block_types) -> list:
    """Semantic names absent from a BlockTypeTable."""
    return [name for name in SEMANTIC_BLOCK_NAMES if name not in block_types]


class VoxelMap(Mapping):
    """
    The engine's output: world (x, y, z) -> block-type ID.

    Backed by the dense code array the stages built, so lookups are O(1) and
    memory is bounded by width * length * max_height bytes. Voxels whose
    semantic type is missing from the BlockTypeTable are absent from the
    mapping and reported through missing_block_types.
    """

    def __init__(self, codes: np.ndarray, block_types):
        if codes.ndim != 3:
            raise ValueError(f"Expected a 3D code array, got shape {codes.shape}")
        self.codes = codes
        self.block_types = dict(block_types)
        self.length, self.max_height, self.width = codes.shape
        self.origin_x = -(self.width // 2)
        self.origin_z = -(self.length // 2)

        # Code -> external ID; -1 marks air and unmapped codes.
        self._id_lut = np.full(len(BLOCK_NAMES), -1, dtype=np.int64)
        for code, name in enumerate(BLOCK_NAMES):
            if code != AIR and name in self.block_types:
                self._id_lut[code] = self.block_types[name]

        present = np.unique(codes)
        self.missing_block_types = [
            BLOCK_NAMES[code] for code in present
            if code != AIR and self._id_lut[code] < 0
        ]
        self._mapped = self._id_lut[codes] >= 0

    # --- Coordinates ---
    @property
    def bounds(self):
        """((min_x, max_x), (min_y, max_y), (min_z, max_z)), inclusive."""
        return (
            (self.origin_x, self.origin_x + self.width - 1),
            (0, self.max_height - 1),
            (self.origin_z, self.origin_z + self.length - 1),
        )

    def _index(self, key):
        try:
            x, y, z = key
        except (TypeError, ValueError):
            return None
        ix = x - self.origin_x
        iz = z - self.origin_z
        if 0 <= ix < self.width and 0 <= y < self.max_height and 0 <= iz < self.length:
            return iz, y, ix
        return None

    # --- Mapping protocol ---
    def __getitem__(self, key):
        index = self._index(key)
        if index is None or not self._mapped[index]:
            raise KeyError(key)
        return int(self._id_lut[self.codes[index]])

    def __iter__(self):
        for iz, y, ix in zip(*np.nonzero(self._mapped)):
            yield (int(ix) + self.origin_x, int(y), int(iz) + self.origin_z)

    def __len__(self):
        return int(np.count_nonzero(self._mapped))

    def __contains__(self, key):
        index = self._index(key)
        return index is not None and bool(self._mapped[index])

    def __repr__(self):
        return (f"VoxelMap(width={self.width}, length={self.length}, "
                f"max_height={self.max_height}, voxels={len(self)})")

    # --- Queries ---
    def block_name_at(self, x: int, y: int, z: int):
        """Semantic name of the voxel at (x, y, z), or None for air."""
        index = self._index((x, y, z))
        if index is None:
            return None
        code = self.codes[index]
        return None if code == AIR else BLOCK_NAMES[code]

    def surface_height(self, x: int, z: int):
        """Highest y holding a non-water block in column (x, z), or None."""
        index = self._index((x, 0, z))
        if index is None:
            return None
        iz, _, ix = index
        column = self.codes[iz, :, ix]
        solid = np.nonzero((column != AIR) & (column != WATER))[0]
        return int(solid[-1]) if solid.size else None

    def block_counts(self) -> dict:
        """Semantic name -> number of voxels, for every non-air code present."""
        counts = np.bincount(self.codes.ravel(), minlength=len(BLOCK_NAMES))
        return {BLOCK_NAMES[code]: int(count) for code, count in enumerate(counts)
                if code != AIR and count}

    def to_dict(self) -> dict:
        """The "x,y,z" -> ID form consumed by persistence collaborators."""
        iz, ys, ix = np.nonzero(self._mapped)
        ids = self._id_lut[self.codes[iz, ys, ix]]
        xs = ix + self.origin_x
        zs = iz + self.origin_z
        return {f"{x},{y},{z}": int(block_id) for x, y, z, block_id in zip(xs, ys, zs, ids)}
