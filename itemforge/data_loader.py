"""
ItemForge - itemforge/data_loader.py
JIT Data Loaders for TOML content powered by Pydantic.
======================================================
Version:     0.3
Stack:       Python 3.11+ | Pydantic v2 | tomllib
Status:      Content validation and loading layer. Fails fast: a missing
             file raises FileNotFoundError, bad data raises ValidationError.

Layout under DATA_DIR
---------------------
  affixes/<kind>.toml        [[prefix]] / [[suffix]] (or [[unified]]) category trees
  items/<folder>/<id>.toml   item bases: base stats, tags, implicit templates
  names.toml                 rare-name word pools
  generation.toml            GenerationSettings overrides
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from itemforge.affixes import Affix, SlotKind
from itemforge.config import GenerationSettings
from itemforge.items import (
    ITEM_CLASSES,
    BaseItem,
    Effigy,
    EffigyElement,
    ItemKind,
    Weapon,
    WeaponHandedness,
)
from itemforge.logging_config import get_logger
from itemforge.modifiers import DamageType
from itemforge.pool import AffixCategory, AffixPool, SlotTree
from itemforge.rng import derive_seed
from itemforge.roller import roll_affix

logger = get_logger("Data")

# ================================================================================
# SCHEMAS
# ================================================================================

class ItemBaseDef(BaseModel):
    model_config = ConfigDict(frozen=True)
    id: str
    name: str
    kind: ItemKind
    description: str = ""
    equip_slot: str = "hand"
    value: int = 10
    tags: List[str] = Field(default_factory=list)
    is_unique: bool = False
    # Variant base stats, keyed by the variant's field names (e.g. "min_damage", "armour").
    stats: Dict[str, float] = Field(default_factory=dict)
    handedness: WeaponHandedness = WeaponHandedness.ONE_HANDED
    damage_type: DamageType = DamageType.PHYSICAL
    element: EffigyElement = EffigyElement.FIRE
    implicits: List[Affix] = Field(default_factory=list)
    # Fixed affixes for unique bases; rolled once and never regenerated.
    unique_affixes: List[Affix] = Field(default_factory=list)


class NameDataDef(BaseModel):
    model_config = ConfigDict(frozen=True)
    rare_prefixes: List[str] = Field(default_factory=list)
    rare_suffixes: Dict[ItemKind, List[str]] = Field(default_factory=dict)

    def suffix_pool_for(self, kind: Optional[ItemKind]) -> List[str]:
        if kind is None:
            return []
        return self.rare_suffixes.get(kind, [])


# ================================================================================
# LOADERS & CACHE (JIT)
# ================================================================================

_ITEM_BASE_CACHE: Dict[str, ItemBaseDef] = {}
_NAME_DATA_CACHE: Optional[NameDataDef] = None

DATA_DIR = Path(__file__).parent / "data"


def _read_toml(path: Path) -> Dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _categories(raw: List[Dict[str, Any]], slot_kind: SlotKind) -> tuple:
    """Validates one slot list, stamping slot_kind onto every affix that omits it."""
    categories = []
    for category in raw:
        for sub in category.get("sub_categories", []):
            for affix in sub.get("affixes", []):
                affix.setdefault("slot_kind", slot_kind.value)
        categories.append(AffixCategory.model_validate(category))
    return tuple(categories)


def load_affix_tree(path: Path) -> SlotTree:
    if not path.exists():
        raise FileNotFoundError(f"Affix tree not found: {path}")

    data = _read_toml(path)
    prefixes = _categories(data.get("prefix", []), SlotKind.PREFIX)
    suffixes = _categories(data.get("suffix", []), SlotKind.SUFFIX)
    # unified trees have no prefix/suffix split; they sit on the prefix side
    prefixes += _categories(data.get("unified", []), SlotKind.UNIFIED)
    return SlotTree(prefixes=prefixes, suffixes=suffixes)


def load_affix_pool(root: Optional[Union[str, Path]] = None) -> AffixPool:
    """Builds a fresh AffixPool from every <kind>.toml under root (default DATA_DIR/affixes)."""
    root = Path(root) if root is not None else DATA_DIR / "affixes"
    if not root.is_dir():
        raise FileNotFoundError(f"Affix directory not found: {root}")

    trees: Dict[ItemKind, SlotTree] = {}
    for kind in ItemKind:
        path = root / f"{kind.value}.toml"
        if not path.exists():
            logger.warning("No affix tree for %s at %s", kind.value, path)
            continue
        trees[kind] = load_affix_tree(path)

    pool = AffixPool(trees=trees)
    logger.info("Loaded affix pool: %d templates %s", pool.total_count(), pool.counts())
    return pool


def get_item_base(item_path: str) -> ItemBaseDef:
    """JIT loads an item base from TOML (e.g. 'weapons/rusted_sword')."""
    if item_path in _ITEM_BASE_CACHE:
        return _ITEM_BASE_CACHE[item_path]

    path = DATA_DIR / "items" / f"{item_path}.toml"
    if not path.exists():
        raise FileNotFoundError(f"Item base not found: {path}")

    item = ItemBaseDef(**_read_toml(path))
    _ITEM_BASE_CACHE[item_path] = item
    return item


def get_item_base_paths() -> List[str]:
    """Every item base path under DATA_DIR/items, sorted."""
    root = DATA_DIR / "items"
    if not root.exists():
        return []
    return sorted(p.relative_to(root).with_suffix("").as_posix() for p in root.rglob("*.toml"))


def get_name_data() -> NameDataDef:
    """Loads the rare-name word pools. Cached globally."""
    global _NAME_DATA_CACHE
    if _NAME_DATA_CACHE is not None:
        return _NAME_DATA_CACHE

    path = DATA_DIR / "names.toml"
    if not path.exists():
        raise FileNotFoundError(f"Name data not found: {path}")

    _NAME_DATA_CACHE = NameDataDef(**_read_toml(path))
    return _NAME_DATA_CACHE


def get_generation_settings(path: Optional[Union[str, Path]] = None) -> GenerationSettings:
    """Generation knobs from generation.toml; defaults when the default file is absent."""
    explicit = path is not None
    path = Path(path) if explicit else DATA_DIR / "generation.toml"
    if not path.exists():
        if explicit:
            raise FileNotFoundError(f"Generation settings not found: {path}")
        return GenerationSettings()
    return GenerationSettings(**_read_toml(path))


def clear_caches() -> None:
    global _NAME_DATA_CACHE
    _ITEM_BASE_CACHE.clear()
    _NAME_DATA_CACHE = None


# ================================================================================
# ITEM CONSTRUCTION
# ================================================================================

def build_item(base_def: ItemBaseDef, item_level: int = 1, seed: int = 0) -> BaseItem:
    """
    Creates the BaseItem variant for a base definition. Implicits (and the
    fixed affixes of unique bases) are rolled from seeds derived from
    (seed, base id, position), so the same arguments give the same item.
    """
    cls = ITEM_CLASSES[base_def.kind]
    fields: Dict[str, Any] = {
        "name": base_def.name,
        "item_level": item_level,
        "tags": set(base_def.tags),
        "is_unique": base_def.is_unique,
        "base_id": base_def.id,
    }
    if cls is Weapon:
        fields["handedness"] = base_def.handedness
        fields["damage_type"] = base_def.damage_type
    elif cls is Effigy:
        fields["element"] = base_def.element

    variant_fields = set(cls.__dataclass_fields__) - set(BaseItem.__dataclass_fields__)
    for stat, value in base_def.stats.items():
        if stat not in variant_fields:
            logger.warning("Ignoring unknown base stat %r on %s", stat, base_def.id)
            continue
        fields[stat] = value

    item = cls(**fields)

    for i, template in enumerate(base_def.implicits):
        rolled = roll_affix(template, derive_seed(seed, base_def.id, "implicit", i))
        if rolled is not None:
            item.implicit_modifiers.append(rolled)

    for i, template in enumerate(base_def.unique_affixes):
        rolled = roll_affix(template, derive_seed(seed, base_def.id, "unique", i))
        if rolled is None:
            continue
        if template.slot_kind == SlotKind.SUFFIX:
            item.suffixes.append(rolled)
        else:
            item.prefixes.append(rolled)

    return item
