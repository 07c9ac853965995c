# voxel_worldgen/settings.py

"""
================================================================================
GENERATION SETTINGS
================================================================================
This module consolidates user configuration over the internal defaults into an
immutable GenerationSettings object and validates it at the boundary, before
any generation work begins.

Data Contract:
---------------
- Inputs:
    - config (dict): User parameters. Both snake_case keys and the camelCase
      names produced by the settings UI are accepted.
- Outputs:
    - A frozen GenerationSettings instance.
- Side Effects: None.
- Invariants: A GenerationSettings that passed validate() describes a world
  with at least one column and room for a lava floor, a cave band and a
  surface.
================================================================================
"""

import numbers
from dataclasses import dataclass, field, asdict

from . import config as DEFAULTS

INT32_MIN = -2 ** 31
INT32_MAX = 2 ** 31 - 1


class InvalidSettingsError(ValueError):
    """Raised when generation settings violate a precondition."""

    def __init__(self, problems):
        self.problems = list(problems)
        super().__init__("Invalid generation settings: " + "; ".join(self.problems))


class InvalidSeedError(ValueError):
    """Raised when a seed is not a signed 32-bit integer."""


# camelCase names used by the settings UI -> snake_case attribute names.
_CAMEL_CASE_ALIASES = {
    "maxHeight": "max_height",
    "flatnessFactor": "flatness_factor",
    "terrainBlend": "terrain_blend",
    "seaLevel": "sea_level",
    "riverFreq": "river_freq",
    "oreRarity": "ore_rarity",
    "generateOres": "generate_ores",
    "isCompletelyFlat": "is_completely_flat",
    "mountainRange": "mountain_range",
    "snowHeight": "snow_height",
    "snowCap": "snow_cap",
}


def _normalize_keys(config: dict) -> dict:
    return {_CAMEL_CASE_ALIASES.get(key, key): value for key, value in config.items()}


@dataclass(frozen=True)
class MountainRangeSettings:
    """Border mountain range parameters. Ignored unless enabled."""
    enabled: bool = DEFAULTS.DEFAULT_MOUNTAIN_RANGE["enabled"]
    height: float = DEFAULTS.DEFAULT_MOUNTAIN_RANGE["height"]
    size: float = DEFAULTS.DEFAULT_MOUNTAIN_RANGE["size"]
    snow_height: float = DEFAULTS.DEFAULT_MOUNTAIN_RANGE["snow_height"]
    snow_cap: bool = DEFAULTS.DEFAULT_MOUNTAIN_RANGE["snow_cap"]

    @classmethod
    def from_config(cls, config: dict) -> "MountainRangeSettings":
        if config is None:
            return cls()
        config = _normalize_keys(config)
        defaults = DEFAULTS.DEFAULT_MOUNTAIN_RANGE
        return cls(
            enabled=bool(config.get("enabled", defaults["enabled"])),
            height=float(config.get("height", defaults["height"])),
            size=float(config.get("size", defaults["size"])),
            snow_height=float(config.get("snow_height", defaults["snow_height"])),
            snow_cap=bool(config.get("snow_cap", defaults["snow_cap"])),
        )


@dataclass(frozen=True)
class GenerationSettings:
    """Immutable input to a generation call. Never mutated during generation."""
    width: int = DEFAULTS.DEFAULT_WIDTH
    length: int = DEFAULTS.DEFAULT_LENGTH
    max_height: int = DEFAULTS.DEFAULT_MAX_HEIGHT
    scale: float = DEFAULTS.DEFAULT_SCALE
    roughness: float = DEFAULTS.DEFAULT_ROUGHNESS
    flatness_factor: float = DEFAULTS.DEFAULT_FLATNESS_FACTOR
    smoothing: float = DEFAULTS.DEFAULT_SMOOTHING
    terrain_blend: float = DEFAULTS.DEFAULT_TERRAIN_BLEND
    sea_level: int = DEFAULTS.DEFAULT_SEA_LEVEL
    temperature: float = DEFAULTS.DEFAULT_TEMPERATURE
    river_freq: float = DEFAULTS.DEFAULT_RIVER_FREQ
    ore_rarity: float = DEFAULTS.DEFAULT_ORE_RARITY
    generate_ores: bool = DEFAULTS.DEFAULT_GENERATE_ORES
    is_completely_flat: bool = DEFAULTS.DEFAULT_IS_COMPLETELY_FLAT
    mountain_range: MountainRangeSettings = field(default_factory=MountainRangeSettings)

    @classmethod
    def from_config(cls, config: dict) -> "GenerationSettings":
        """
        Builds settings from a user configuration dictionary, falling back to
        the internal defaults for every missing key.
        """
        user_config = _normalize_keys(config or {})
        return cls(
            width=int(user_config.get("width", DEFAULTS.DEFAULT_WIDTH)),
            length=int(user_config.get("length", DEFAULTS.DEFAULT_LENGTH)),
            max_height=int(user_config.get("max_height", DEFAULTS.DEFAULT_MAX_HEIGHT)),
            scale=float(user_config.get("scale", DEFAULTS.DEFAULT_SCALE)),
            roughness=float(user_config.get("roughness", DEFAULTS.DEFAULT_ROUGHNESS)),
            flatness_factor=float(user_config.get("flatness_factor", DEFAULTS.DEFAULT_FLATNESS_FACTOR)),
            smoothing=float(user_config.get("smoothing", DEFAULTS.DEFAULT_SMOOTHING)),
            terrain_blend=float(user_config.get("terrain_blend", DEFAULTS.DEFAULT_TERRAIN_BLEND)),
            sea_level=int(user_config.get("sea_level", DEFAULTS.DEFAULT_SEA_LEVEL)),
            temperature=float(user_config.get("temperature", DEFAULTS.DEFAULT_TEMPERATURE)),
            river_freq=float(user_config.get("river_freq", DEFAULTS.DEFAULT_RIVER_FREQ)),
            ore_rarity=float(user_config.get("ore_rarity", DEFAULTS.DEFAULT_ORE_RARITY)),
            generate_ores=bool(user_config.get("generate_ores", DEFAULTS.DEFAULT_GENERATE_ORES)),
            is_completely_flat=bool(user_config.get("is_completely_flat", DEFAULTS.DEFAULT_IS_COMPLETELY_FLAT)),
            mountain_range=MountainRangeSettings.from_config(user_config.get("mountain_range")),
        )

    def to_dict(self) -> dict:
        """A JSON-serializable snapshot, used as the world's generation_config."""
        return asdict(self)

    def validate(self) -> "GenerationSettings":
        """
        Checks every precondition and raises InvalidSettingsError listing all
        violations at once. Returns self so calls can be chained.
        """
        problems = []
        if self.width < 1:
            problems.append(f"width must be >= 1 (got {self.width})")
        if self.length < 1:
            problems.append(f"length must be >= 1 (got {self.length})")
        if self.max_height < DEFAULTS.MIN_MAX_HEIGHT:
            problems.append(f"max_height must be >= {DEFAULTS.MIN_MAX_HEIGHT} (got {self.max_height})")
        if self.scale <= 0:
            problems.append(f"scale must be positive (got {self.scale})")
        if self.roughness <= 0:
            problems.append(f"roughness must be positive (got {self.roughness})")
        if self.river_freq < 0:
            problems.append(f"river_freq must be >= 0 (got {self.river_freq})")

        for name in ("flatness_factor", "smoothing", "terrain_blend", "temperature", "ore_rarity"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                problems.append(f"{name} must be within [0, 1] (got {value})")

        if not 0 <= self.sea_level < max(self.max_height, 1):
            problems.append(f"sea_level must be within [0, max_height) (got {self.sea_level})")

        mountains = self.mountain_range
        if mountains.enabled:
            for name in ("height", "size", "snow_height"):
                value = getattr(mountains, name)
                if value < 0:
                    problems.append(f"mountain_range.{name} must be >= 0 (got {value})")

        if problems:
            raise InvalidSettingsError(problems)
        return self


def validate_seed(seed) -> int:
    """Returns the seed as an int, or raises InvalidSeedError. numpy integers are accepted."""
    if isinstance(seed, bool) or not isinstance(seed, numbers.Integral):
        raise InvalidSeedError(f"Seed must be an integer, got {type(seed).__name__}")
    seed = int(seed)
    if not INT32_MIN <= seed <= INT32_MAX:
        raise InvalidSeedError(f"Seed {seed} is outside the signed 32-bit range")
    return seed


def seed_from_text(text: str) -> int:
    """
    Hashes a textual seed to a signed 32-bit integer:
    acc = (acc * 31 + codepoint) & 0xffffffff, reinterpreted as signed.
    Every string is hashed, including numeric ones ("42" is not 42).
    """
    acc = 0
    for char in text:
        acc = (acc * 31 + ord(char)) & 0xFFFFFFFF
        if acc > INT32_MAX:
            acc -= 2 ** 32
    return acc


def _roughness_from_mountain_height(mountain_value: float) -> float:
    if mountain_value < 30:
        return 0.3 + (mountain_value / 30) * 0.2
    if mountain_value < 70:
        return 0.5 + ((mountain_value - 30) / 40) * 1.0
    return 1.5 + ((mountain_value - 70) / 30) * 2.5


def _slider(options: dict, key: str, default):
    # A slider at 0 counts as unset.
    return options.get(key) or default


def settings_from_options(options: dict) -> GenerationSettings:
    """
    Maps the 0-100 slider options of the world settings panel to generation
    settings.

    Recognised options: width, length, mountainHeight, waterLevel,
    terrainFlatness, oreDensity, temperature, generateOreDeposits and
    mountainRange. Missing options take the panel's defaults, and so do
    sliders left at 0, except mountainRange, where 0 disables the range.
    """
    raw_width = _slider(options, "width", 200)
    raw_length = _slider(options, "length", 200)
    width = max(10, min(raw_width, 1000))
    length = max(10, min(raw_length, 1000))
    terrain_flatness = _slider(options, "terrainFlatness", 15)
    mountain_range = options.get("mountainRange") or 0

    # Scale follows the requested size, before clamping.
    scale = 0.03 * (1000 / max(raw_width, raw_length))
    if width < 100 or length < 100:
        scale *= 3
    elif width > 500 or length > 500:
        scale *= 1.2

    return GenerationSettings(
        width=width,
        length=length,
        max_height=DEFAULTS.DEFAULT_MAX_HEIGHT,
        scale=scale,
        roughness=_roughness_from_mountain_height(_slider(options, "mountainHeight", 50)),
        flatness_factor=terrain_flatness / 100,
        smoothing=0.7,
        terrain_blend=0.5,
        sea_level=32 + round(_slider(options, "waterLevel", 50) / 100 * 6),
        temperature=_slider(options, "temperature", 50) / 100,
        river_freq=0.05,
        ore_rarity=0.83 - _slider(options, "oreDensity", 50) / 100 * 0.18,
        generate_ores=options.get("generateOreDeposits", True) is not False,
        is_completely_flat=terrain_flatness >= 98,
        mountain_range=MountainRangeSettings(
            enabled=mountain_range > 0,
            size=mountain_range / 100,
            height=round(20 + mountain_range / 100 * 30),
            snow_cap=True,
            snow_height=round(40 + mountain_range / 100 * 15),
        ),
    )
