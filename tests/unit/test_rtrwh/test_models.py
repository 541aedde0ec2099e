import pytest
from rtrwh.models import (
    ProjectInput, RoofType, AquiferType, RechargeStructureType,
)


def test_project_input_defaults():
    """Verify optional fields default to None."""
    inputs = ProjectInput(
        roof_area=100.0,
        roof_type=RoofType.TILES,
        household_size=4,
        water_scarcity_days=60,
        annual_rainfall=800.0,
        rainfall_intensity=40.0,
        aquifer_type=AquiferType.SEMI_CONSOLIDATED,
    )
    assert inputs.depth_water_premonsoon is None
    assert inputs.infiltration_rate is None
    assert inputs.depth_reduction is None


def test_depth_reduction():
    """Verify seasonal water table rise is pre minus post."""
    inputs = ProjectInput(
        roof_area=100.0, roof_type="Tiles", household_size=4, water_scarcity_days=60,
        annual_rainfall=800.0, rainfall_intensity=40.0, aquifer_type="Unconsolidated",
        depth_water_premonsoon=8.0, depth_water_postmonsoon=5.5,
    )
    assert inputs.depth_reduction == pytest.approx(2.5)


def test_project_input_is_frozen():
    inputs = ProjectInput(100.0, RoofType.TILES, 4, 60, 800.0, 40.0, AquiferType.CONSOLIDATED)
    with pytest.raises(Exception):
        inputs.roof_area = 50.0


def test_project_input_dict_round_trip():
    """Verify from_dict restores enum members from their string values."""
    inputs = ProjectInput(100.0, RoofType.GI_SHEET, 4, 60, 800.0, 40.0, AquiferType.CONSOLIDATED,
                          soil_type="Sandy loam")
    d = inputs.to_dict()
    assert d['roof_type'] == "GI Sheet"
    assert d['aquifer_type'] == "Consolidated"

    restored = ProjectInput.from_dict(d)
    assert restored == inputs
    assert restored.roof_type is RoofType.GI_SHEET


def test_from_dict_keeps_unknown_roof_type():
    d = ProjectInput(100.0, "Thatch", 4, 60, 800.0, 40.0, "Consolidated").to_dict()
    assert ProjectInput.from_dict(d).roof_type == "Thatch"


def test_string_enums_compare_equal():
    assert RoofType.CONCRETE == "Concrete"
    assert AquiferType("Semi-consolidated") is AquiferType.SEMI_CONSOLIDATED


def test_recharge_structure_is_pit():
    assert RechargeStructureType.PIT.is_pit
    assert RechargeStructureType.SHALLOW_PIT.is_pit
    assert not RechargeStructureType.SHAFT.is_pit
