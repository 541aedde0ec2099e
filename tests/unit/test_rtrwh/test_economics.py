"""Tests for the economic analysis engine."""

import math
import pytest
import numpy as np
import pandas as pd
from rtrwh.costing import CostBreakdown
from rtrwh.economics import (
    EconomicsEngine, EconomicAnalysis, BenefitInputs, AnnualBenefits,
    calculate_annual_benefits, calculate_annual_costs,
    calculate_annual_maintenance_cost, calculate_payback_period,
    calculate_bc_ratio, calculate_npv, recovery_timeline, get_economics_engine,
)
from rtrwh.exceptions import InvalidInputError


class TestAnnualBenefits:
    """Tests for the benefit estimate."""

    def test_water_savings_only(self):
        benefits = calculate_annual_benefits(BenefitInputs(water_savings_volume=100000))
        assert benefits.water_cost_savings == pytest.approx(2000)
        assert benefits.energy_savings == 0
        assert benefits.pump_maintenance_savings == 0
        assert benefits.total == pytest.approx(2000)

    def test_water_table_rise_adds_energy_and_pump_savings(self):
        benefits = calculate_annual_benefits(
            BenefitInputs(water_savings_volume=100000, depth_reduction=2.0)
        )
        assert benefits.energy_savings == pytest.approx(100 * 0.5 * 7)
        assert benefits.pump_maintenance_savings == 2000
        assert benefits.total == pytest.approx(4350)

    def test_falling_water_table_adds_nothing(self):
        benefits = calculate_annual_benefits(
            BenefitInputs(water_savings_volume=100000, depth_reduction=-1.0)
        )
        assert benefits.total == pytest.approx(2000)

    def test_negative_volume_rejected(self):
        with pytest.raises(InvalidInputError):
            calculate_annual_benefits(BenefitInputs(water_savings_volume=-1))

    def test_to_dict_includes_total(self):
        d = AnnualBenefits(water_cost_savings=10, energy_savings=5).to_dict()
        assert d['total'] == 15


class TestAnnualCosts:
    """Tests for annualized costs and maintenance."""

    def test_annualized_cost_fractions(self):
        costs = calculate_annual_costs(100000)
        assert costs.interest_loss == pytest.approx(10000)
        assert costs.maintenance_repair == pytest.approx(2500)
        assert costs.depreciation == pytest.approx(5000)
        assert costs.miscellaneous == pytest.approx(1000)
        assert costs.total == pytest.approx(18500)

    def test_annual_maintenance(self):
        assert calculate_annual_maintenance_cost() == pytest.approx(1500 + 750 + 1000)


class TestIndicators:
    """Tests for payback, B/C ratio and NPV helpers."""

    def test_payback(self):
        assert calculate_payback_period(100000, 20000) == pytest.approx(5.0)

    def test_payback_never_recovered(self):
        assert calculate_payback_period(100000, 0) == math.inf
        assert calculate_payback_period(100000, -500) == math.inf

    def test_bc_ratio_zero_cost(self):
        assert calculate_bc_ratio(1000, 0) == math.inf

    def test_npv_zero_discount(self):
        assert calculate_npv(100000, 16750, 20, 0.0) == pytest.approx(-100000 + 20 * 16750)

    def test_npv_single_year(self):
        assert calculate_npv(1000, 1100, 1, 0.10) == pytest.approx(0.0, abs=1e-6)

    def test_npv_decreases_with_discount_rate(self):
        low = calculate_npv(100000, 16750, 20, 0.05)
        high = calculate_npv(100000, 16750, 20, 0.12)
        assert high < low


class TestEconomicsEngine:
    """Tests for the full analysis."""

    def test_basic_analysis(self):
        engine = EconomicsEngine()
        result = engine.analyze(CostBreakdown(total_cost=100000), 20000)

        assert result.capital_cost == 100000
        assert result.annual_maintenance_cost == pytest.approx(3250)
        assert result.annual_cost_of_expenditure == pytest.approx(18500)
        assert result.bc_ratio == pytest.approx(20000 / 18500)
        assert result.payback_period == pytest.approx(100000 / 16750)
        assert result.horizon_years == 20
        assert result.discount_rate == 0.08

    def test_water_energy_split(self):
        result = EconomicsEngine().analyze(CostBreakdown(total_cost=100000), 30000)
        assert result.annual_water_savings == pytest.approx(20000)
        assert result.annual_energy_savings == pytest.approx(10000)
        assert result.annual_water_savings + result.annual_energy_savings == pytest.approx(30000)

    def test_subsidy_scenario(self):
        result = EconomicsEngine().analyze(
            CostBreakdown(total_cost=100000), 20000, subsidy_fraction=0.5
        )
        assert result.bc_ratio_with_subsidy == pytest.approx(20000 / 9250)
        assert result.payback_period_with_subsidy == pytest.approx(50000 / 16750)
        assert result.capital_cost_with_subsidy == pytest.approx(50000)

    def test_no_subsidy_matches_base(self):
        result = EconomicsEngine().analyze(CostBreakdown(total_cost=100000), 20000)
        assert result.bc_ratio_with_subsidy == result.bc_ratio
        assert result.payback_period_with_subsidy == result.payback_period

    def test_full_subsidy(self):
        result = EconomicsEngine().analyze(
            CostBreakdown(total_cost=100000), 20000, subsidy_fraction=1.0
        )
        assert result.bc_ratio_with_subsidy == math.inf
        assert result.payback_period_with_subsidy == 0

    def test_npv_at_zero_discount(self):
        result = EconomicsEngine().analyze(
            CostBreakdown(total_cost=100000), 20000, horizon_years=10, discount_rate=0.0
        )
        assert result.net_present_value == pytest.approx(-100000 + 10 * (20000 - 3250))

    def test_benefit_below_maintenance(self):
        result = EconomicsEngine().analyze(CostBreakdown(total_cost=50000), 43.2)
        assert result.payback_period == math.inf
        assert result.payback_period_with_subsidy == math.inf
        assert not math.isnan(result.net_present_value)
        assert result.net_present_value < -50000

    @pytest.mark.parametrize("kwargs", [
        {"horizon_years": 0},
        {"horizon_years": 2.5},
        {"horizon_years": True},
        {"discount_rate": -1.0},
        {"subsidy_fraction": 1.5},
        {"subsidy_fraction": -0.1},
    ])
    def test_invalid_parameters(self, kwargs):
        with pytest.raises(InvalidInputError):
            EconomicsEngine().analyze(CostBreakdown(total_cost=1000), 500, **kwargs)

    def test_numpy_integer_horizon(self):
        result = EconomicsEngine().analyze(
            CostBreakdown(total_cost=100000), 20000, horizon_years=np.int64(20)
        )
        expected = EconomicsEngine().analyze(CostBreakdown(total_cost=100000), 20000)
        assert result.horizon_years == 20
        assert type(result.horizon_years) is int
        assert result.net_present_value == pytest.approx(expected.net_present_value)

    def test_negative_benefit_rejected(self):
        with pytest.raises(InvalidInputError):
            EconomicsEngine().analyze(CostBreakdown(total_cost=1000), -1)

    def test_factory(self):
        assert isinstance(get_economics_engine(), EconomicsEngine)


class TestRecoveryTimeline:
    """Tests for the year-by-year recovery table."""

    def _analysis(self, **kwargs) -> EconomicAnalysis:
        return EconomicsEngine().analyze(CostBreakdown(total_cost=100000), 20000, **kwargs)

    def test_shape(self):
        timeline = recovery_timeline(self._analysis(horizon_years=15))
        assert isinstance(timeline, pd.DataFrame)
        assert len(timeline) == 15
        assert list(timeline["year"]) == list(range(1, 16))

    def test_final_discounted_position_is_npv(self):
        analysis = self._analysis()
        timeline = recovery_timeline(analysis)
        assert timeline["cumulative_discounted"].iloc[-1] == pytest.approx(analysis.net_present_value)

    def test_cumulative_positions(self):
        analysis = self._analysis(subsidy_fraction=0.5)
        timeline = recovery_timeline(analysis)
        assert timeline["cumulative_net"].iloc[0] == pytest.approx(-100000 + 16750)
        assert timeline["cumulative_net_with_subsidy"].iloc[0] == pytest.approx(-50000 + 16750)

    def test_recovery_year_matches_payback(self):
        analysis = self._analysis()
        timeline = recovery_timeline(analysis)
        first_positive = timeline[timeline["cumulative_net"] >= 0]["year"].iloc[0]
        assert first_positive == math.ceil(analysis.payback_period)
