"""
ItemForge - itemforge/config.py
Design variables for affix generation.
=====================================
Version:     0.2
Stack:       Python 3.11+ | Pydantic v2
Status:      Defaults are authoritative; data/generation.toml may override.

Design Variables (change here or override through GenerationSettings)
----------------------------------------------------------------------
  DEFAULT_MAGIC_CHANCE    0.25   - cumulative threshold, rolled after rare
  DEFAULT_RARE_CHANCE     0.05   - checked first against the same draw
  MAX_PREFIXES            3      - per-item prefix cap
  MAX_SUFFIXES            3      - per-item suffix cap
  UNIFIED_AFFIX_CAP       4      - combined cap for unified-pool families
  TIER_LEVEL_LADDER       80..10 - item level needed to unlock each tier
"""

from __future__ import annotations

from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from itemforge.logging_config import get_logger

logger = get_logger("Config")

# ============================================================
# DESIGN VARIABLE DEFAULTS
# ============================================================

DEFAULT_MAGIC_CHANCE: float = 0.25
DEFAULT_RARE_CHANCE: float = 0.05

MAX_PREFIXES: int = 3
MAX_SUFFIXES: int = 3
UNIFIED_AFFIX_CAP: int = 4

BEST_TIER: int = 1
MAX_TIER: int = 9

# (minimum item level, tier unlocked). Checked top-down, first match wins.
TIER_LEVEL_LADDER: Tuple[Tuple[int, int], ...] = (
    (80, 1),
    (70, 2),
    (60, 3),
    (50, 4),
    (40, 5),
    (30, 6),
    (20, 7),
    (10, 8),
)

# Rare counts are topped up until prefixes + suffixes reaches this.
RARE_MIN_AFFIXES: int = 3


class GenerationSettings(BaseModel):
    """Runtime-tunable generation knobs. Loaded via data_loader.get_generation_settings()."""
    model_config = ConfigDict(frozen=True)

    magic_chance: float = Field(default=DEFAULT_MAGIC_CHANCE, ge=0.0, le=1.0)
    rare_chance: float = Field(default=DEFAULT_RARE_CHANCE, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def _warn_rare_above_magic(self) -> "GenerationSettings":
        # rare is tested first on the same draw, so Magic cannot drop here
        if self.rare_chance > self.magic_chance:
            logger.warning("rare_chance %.3f exceeds magic_chance %.3f; Magic items will never drop",
                           self.rare_chance, self.magic_chance)
        return self
