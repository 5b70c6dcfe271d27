"""Tests for the mapping model."""

import pytest

from hangarledger.domain.errors import ValidationError
from hangarledger.domain.import_models import (
    AircraftPreview,
    ImportPreviewData,
    ImportSource,
    PreviewEntity,
)
from hangarledger.domain.mapping import (
    AircraftMapping,
    EntityMapping,
    MappingAction,
    default_mappings,
    load_mapping_overrides,
)


@pytest.fixture
def preview():
    return ImportPreviewData(
        source=ImportSource.AIRPLANE_MANAGER,
        aircraft=(AircraftPreview(key=0, tail_number="N1", exists=False),),
        trips=(),
        standalone_expenses=(),
        categories=(
            PreviewEntity(key=0, name="Fuel", exists=False, is_fuel=True),
            PreviewEntity(key=1, name="Parking", exists=True),
        ),
        vendors=(PreviewEntity(key=0, name="Shell", exists=True),),
        payment_methods=(PreviewEntity(key=0, name="Cash", exists=False),),
        total_expenses=0,
        total_line_items=0,
    )


def test_default_mappings(preview):
    mappings = default_mappings(preview)

    assert mappings.categories["Fuel"] == EntityMapping(
        action=MappingAction.CREATE, new_name="Fuel", is_fuel_category=True
    )
    assert mappings.categories["Parking"].action == MappingAction.MAP
    assert mappings.vendors["Shell"].action == MappingAction.MAP
    assert mappings.payment_methods["Cash"].action == MappingAction.CREATE
    assert mappings.aircraft["N1"] == AircraftMapping(
        action=MappingAction.CREATE, tail_number="N1"
    )


def test_with_override_returns_new_object(preview):
    mappings = default_mappings(preview)

    updated = mappings.with_override(
        "vendors", "Shell", EntityMapping(action=MappingAction.SKIP)
    )

    assert updated.vendors["Shell"].action == MappingAction.SKIP
    assert mappings.vendors["Shell"].action == MappingAction.MAP


def test_with_override_rejects_unknown_kind(preview):
    with pytest.raises(ValidationError):
        default_mappings(preview).with_override(
            "airports", "KAUS", EntityMapping(action=MappingAction.SKIP)
        )


def test_load_overrides_from_json_document(preview):
    mappings = load_mapping_overrides(
        default_mappings(preview),
        {
            "vendors": {"Shell": {"action": "map", "targetId": "vendor-1"}},
            "categories": {"Fuel": {"action": "create", "newName": "Avgas", "isFuelCategory": True}},
            "paymentMethods": {"Cash": {"action": "skip"}},
            "aircraft": {"N1": {"action": "create", "name": "Baron"}},
        },
    )

    assert mappings.vendors["Shell"] == EntityMapping(
        action=MappingAction.MAP, target_id="vendor-1"
    )
    assert mappings.categories["Fuel"].new_name == "Avgas"
    assert mappings.categories["Parking"].action == MappingAction.MAP
    assert mappings.payment_methods["Cash"].action == MappingAction.SKIP
    assert mappings.aircraft["N1"].name == "Baron"
    assert mappings.aircraft["N1"].tail_number == "N1"


def test_load_overrides_rejects_skipping_aircraft(preview):
    with pytest.raises(ValidationError, match="cannot use 'skip'"):
        load_mapping_overrides(
            default_mappings(preview), {"aircraft": {"N1": {"action": "skip"}}}
        )


def test_load_overrides_rejects_unknown_action(preview):
    with pytest.raises(ValidationError, match="Unknown mapping action"):
        load_mapping_overrides(
            default_mappings(preview), {"vendors": {"Shell": {"action": "merge"}}}
        )


def test_load_overrides_rejects_non_object_document(preview):
    with pytest.raises(ValidationError, match="must be an object"):
        load_mapping_overrides(default_mappings(preview), ["vendors"])


def test_load_overrides_rejects_non_object_entry(preview):
    with pytest.raises(ValidationError, match="vendors 'Shell' must be an object"):
        load_mapping_overrides(default_mappings(preview), {"vendors": {"Shell": "skip"}})
