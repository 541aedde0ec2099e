"""Tests for the assessment pipeline."""

import math
import pytest
from unittest.mock import patch
from rtrwh.pipeline import (
    compute_design, compute_cost_and_economics, assess_project,
    Assessment, CostAndEconomics,
)
from rtrwh.costing import CostInput
from rtrwh.economics import BenefitInputs
from rtrwh.exceptions import InvalidInputError
from rtrwh.models import ProjectInput, RoofType, AquiferType, RechargeStructureType
from rtrwh.tables import CostRates, DesignTables
from rtrwh.viability import ViabilityCategory


def reference_input(**overrides) -> ProjectInput:
    values = dict(
        roof_area=100.0,
        roof_type=RoofType.CONCRETE,
        household_size=4,
        water_scarcity_days=90,
        annual_rainfall=1000.0,
        rainfall_intensity=50.0,
        aquifer_type=AquiferType.UNCONSOLIDATED,
    )
    values.update(overrides)
    return ProjectInput(**values)


class TestComputeDesign:
    """Tests for compute_design()."""

    def test_reference_scenario(self):
        design = compute_design(reference_input())
        assert design.water_available == pytest.approx(70000)
        assert design.water_required == 2160
        assert design.is_feasible
        assert design.tank_capacity == 3000
        assert design.tank_diameter == 1.71

    def test_depth_rule_overrides_aquifer(self):
        shaft = compute_design(reference_input(aquifer_type=AquiferType.CONSOLIDATED))
        pit = compute_design(reference_input(
            aquifer_type=AquiferType.CONSOLIDATED, depth_water_premonsoon=8.0
        ))
        assert shaft.recharge_structure_type == RechargeStructureType.SHAFT
        assert pit.recharge_structure_type == RechargeStructureType.PIT

    def test_alternate_tables(self):
        design = compute_design(reference_input(), DesignTables(per_capita_demand_lpd=10.0))
        assert design.water_required == 3600


class TestComputeCostAndEconomics:
    """Tests for compute_cost_and_economics()."""

    def test_returns_both_structures(self):
        design = compute_design(reference_input())
        result = compute_cost_and_economics(
            design,
            CostInput(gutter_length=40, downpipe_length=5),
            BenefitInputs(water_savings_volume=design.water_required),
        )
        assert isinstance(result, CostAndEconomics)
        assert result.economic_analysis.capital_cost == result.cost_breakdown.total_cost
        assert result.economic_analysis.total_annual_benefits == pytest.approx(result.annual_benefits.total)

    def test_defaults(self):
        design = compute_design(reference_input())
        result = compute_cost_and_economics(design, CostInput(), BenefitInputs(100000))
        analysis = result.economic_analysis
        assert analysis.horizon_years == 20
        assert analysis.discount_rate == 0.08
        assert analysis.subsidy_fraction == 0.0

    def test_zero_discount_npv(self):
        design = compute_design(reference_input())
        result = compute_cost_and_economics(
            design, CostInput(), BenefitInputs(500000, depth_reduction=1.5),
            horizon_years=10, discount_rate=0.0,
        )
        a = result.economic_analysis
        expected = -a.capital_cost + 10 * (a.total_annual_benefits - a.annual_maintenance_cost)
        assert a.net_present_value == pytest.approx(expected)

    def test_custom_rates(self):
        design = compute_design(reference_input())
        cheap = compute_cost_and_economics(
            design, CostInput(), BenefitInputs(100000), rates=CostRates(labor_fraction=0.0)
        )
        assert cheap.cost_breakdown.labor_cost == 0

    def test_invalid_subsidy(self):
        design = compute_design(reference_input())
        with pytest.raises(InvalidInputError):
            compute_cost_and_economics(design, CostInput(), BenefitInputs(1000), subsidy_fraction=2)


class TestAssessProject:
    """Tests for the end-to-end assessment."""

    def test_small_household_is_not_viable(self):
        assessment = assess_project(reference_input())

        assert isinstance(assessment, Assessment)
        # 2160 L/year of savings cannot cover annual maintenance
        assert assessment.annual_benefits.total == pytest.approx(43.2)
        assert assessment.economic_analysis.payback_period == math.inf
        assert assessment.viability.category == ViabilityCategory.NOT_VIABLE

    def test_benefit_volume_uses_available_when_infeasible(self):
        inputs = reference_input(
            roof_area=20.0, household_size=5, water_scarcity_days=365, annual_rainfall=300.0
        )
        assessment = assess_project(inputs)
        assert not assessment.design.is_feasible
        expected = assessment.design.water_available / 1000 * 20
        assert assessment.annual_benefits.water_cost_savings == pytest.approx(expected)

    def test_depth_reduction_from_readings(self):
        inputs = reference_input(depth_water_premonsoon=8.0, depth_water_postmonsoon=6.0)
        assessment = assess_project(inputs)
        assert assessment.annual_benefits.pump_maintenance_savings == 2000
        assert assessment.annual_benefits.energy_savings > 0

    def test_subsidy_passed_through(self):
        assessment = assess_project(reference_input(), subsidy_fraction=0.5)
        a = assessment.economic_analysis
        assert a.subsidy_fraction == 0.5
        assert a.bc_ratio_with_subsidy == pytest.approx(2 * a.bc_ratio)

    def test_invalid_input_propagates(self):
        with pytest.raises(InvalidInputError):
            assess_project(reference_input(household_size=0))

    def test_to_dict(self):
        d = assess_project(reference_input()).to_dict()
        assert set(d) == {
            'project_input', 'design', 'cost_breakdown',
            'economic_analysis', 'annual_benefits', 'viability',
        }
        assert d['viability']['category'] == "Not Viable"
        assert d['design']['tank_capacity'] == 3000

    def test_not_viable_is_logged_as_warning(self):
        with patch("rtrwh.pipeline.log") as mock_log:
            assess_project(reference_input())
        mock_log.warning.assert_called_once()
        mock_log.info.assert_not_called()
