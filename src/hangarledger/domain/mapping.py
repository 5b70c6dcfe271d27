"""Per-entity create/map/skip decisions made between preview and execute."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional

from hangarledger.domain.errors import ValidationError
from hangarledger.domain.import_models import ImportPreviewData


class MappingAction(str, Enum):
    CREATE = "create"
    MAP = "map"
    SKIP = "skip"


@dataclass(frozen=True)
class EntityMapping:
    """Decision for one vendor, category or payment method source name."""

    action: MappingAction
    target_id: Optional[str] = None
    new_name: Optional[str] = None
    is_fuel_category: Optional[bool] = None


@dataclass(frozen=True)
class AircraftMapping:
    """Decision for one tail number. Aircraft cannot be skipped."""

    action: MappingAction
    tail_number: str
    target_id: Optional[str] = None
    name: Optional[str] = None


_ENTITY_KINDS = ("vendors", "categories", "payment_methods")
_JSON_KINDS = {
    "vendors": "vendors",
    "categories": "categories",
    "paymentMethods": "payment_methods",
    "payment_methods": "payment_methods",
    "aircraft": "aircraft",
}


@dataclass(frozen=True)
class ImportMappings:
    """All mapping decisions, keyed by source name (case-sensitive)."""

    categories: dict[str, EntityMapping] = field(default_factory=dict)
    vendors: dict[str, EntityMapping] = field(default_factory=dict)
    payment_methods: dict[str, EntityMapping] = field(default_factory=dict)
    aircraft: dict[str, AircraftMapping] = field(default_factory=dict)

    def with_override(
        self, kind: str, source_name: str, mapping: EntityMapping | AircraftMapping
    ) -> "ImportMappings":
        """Return a copy with one mapping replaced or added."""
        if kind not in _ENTITY_KINDS and kind != "aircraft":
            raise ValidationError(f"Unknown mapping kind '{kind}'")
        if kind == "aircraft" and not isinstance(mapping, AircraftMapping):
            raise ValidationError("Aircraft mappings must be AircraftMapping instances")
        updated = dict(getattr(self, kind))
        updated[source_name] = mapping
        return replace(self, **{kind: updated})


def default_mappings(preview: ImportPreviewData) -> ImportMappings:
    """Build the initial mappings: map what exists, create the rest."""

    def action(exists: bool) -> MappingAction:
        return MappingAction.MAP if exists else MappingAction.CREATE

    return ImportMappings(
        categories={
            c.name: EntityMapping(
                action=action(c.exists), new_name=c.name, is_fuel_category=c.is_fuel
            )
            for c in preview.categories
        },
        vendors={
            v.name: EntityMapping(action=action(v.exists), new_name=v.name)
            for v in preview.vendors
        },
        payment_methods={
            p.name: EntityMapping(action=action(p.exists), new_name=p.name)
            for p in preview.payment_methods
        },
        aircraft={
            a.tail_number: AircraftMapping(
                action=action(a.exists), tail_number=a.tail_number
            )
            for a in preview.aircraft
        },
    )


def _parse_action(value: Any, allow_skip: bool = True) -> MappingAction:
    try:
        parsed = MappingAction(value)
    except ValueError:
        raise ValidationError(f"Unknown mapping action '{value}'")
    if parsed is MappingAction.SKIP and not allow_skip:
        raise ValidationError("Aircraft mappings cannot use 'skip'")
    return parsed


def load_mapping_overrides(
    base: ImportMappings, data: dict[str, Any]
) -> ImportMappings:
    """Apply overrides from a JSON document onto ``base``.

    The document uses the same camelCase keys as the import metadata:
    ``{"vendors": {"Shell": {"action": "map", "targetId": "..."}}, ...}``.
    """
    if not isinstance(data, dict):
        raise ValidationError("Mapping overrides must be an object")

    mappings = base
    for json_kind, entries in data.items():
        kind = _JSON_KINDS.get(json_kind)
        if kind is None:
            raise ValidationError(f"Unknown mapping kind '{json_kind}'")
        if not isinstance(entries, dict):
            raise ValidationError(f"Mappings for '{json_kind}' must be an object")
        for source_name, entry in entries.items():
            if not isinstance(entry, dict):
                raise ValidationError(
                    f"Mapping for {json_kind} '{source_name}' must be an object"
                )
            if kind == "aircraft":
                mapping: EntityMapping | AircraftMapping = AircraftMapping(
                    action=_parse_action(entry.get("action"), allow_skip=False),
                    tail_number=entry.get("tailNumber", source_name),
                    target_id=entry.get("targetId"),
                    name=entry.get("name"),
                )
            else:
                mapping = EntityMapping(
                    action=_parse_action(entry.get("action")),
                    target_id=entry.get("targetId"),
                    new_name=entry.get("newName"),
                    is_fuel_category=entry.get("isFuelCategory"),
                )
            mappings = mappings.with_override(kind, source_name, mapping)
    return mappings
