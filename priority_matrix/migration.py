"""
Legacy data migration.

Older exports stored importance and urgency on a 1-5 scale. Those records are
converted once, at the import boundary, so that Item only ever sees booleans.
"""

from typing import Any

from .logging_config import get_logger

# Module-level logger
logger = get_logger("migration")

# 4 and 5 on the old scale count as important / urgent
LEGACY_TRAIT_THRESHOLD = 4

_LEGACY_TRAITS = ("importance", "urgency")


def coerce_trait(value: object) -> bool:
    """Convert a stored trait to a boolean."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value >= LEGACY_TRAIT_THRESHOLD
    return False


def migrate_legacy_item(data: dict[str, Any]) -> dict[str, Any]:
    """
    Return a copy of a serialized item with boolean traits.

    The stored quadrant is dropped; it is always derived from the traits.
    """
    migrated = dict(data)
    for trait in _LEGACY_TRAITS:
        raw = data.get(trait)
        migrated[trait] = coerce_trait(raw)
        if raw is not None and not isinstance(raw, bool):
            logger.debug(
                f"Migrated legacy {trait}={raw!r} to {migrated[trait]} for item {data.get('id')}"
            )
    _ = migrated.pop("quadrant", None)
    if migrated.get("battleScore") is None:
        migrated["battleScore"] = 0
    return migrated
