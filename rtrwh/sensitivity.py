"""
Sensitivity Analysis Module - What-if scenarios for RTRWH economics.

Re-runs the economic analysis with one assumption changed (subsidy,
discount rate, capital cost or annual benefit) and reports how the
benefit-cost ratio, payback and NPV move.
"""

import math
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Any

from rtrwh.economics import EconomicAnalysis, EconomicsEngine
from rtrwh.tables import CostRates, DEFAULT_COST_RATES

log = logging.getLogger(__name__)


class ScenarioType(Enum):
    """Types of sensitivity scenarios."""
    SUBSIDY = "subsidy"
    DISCOUNT_RATE = "discount_rate"
    CAPITAL_COST = "capital_cost"
    ANNUAL_BENEFIT = "annual_benefit"


@dataclass
class Scenario:
    """A single what-if scenario."""
    name: str
    scenario_type: ScenarioType
    base_value: float
    adjusted_value: float
    description: str


@dataclass
class SensitivityResult:
    """
    Result of a sensitivity analysis.

    B/C ratio and payback are the subsidy-adjusted figures, which equal the
    plain ones when no subsidy applies.
    """
    scenario: Scenario
    base_bc_ratio: float
    adjusted_bc_ratio: float
    base_payback: float
    adjusted_payback: float
    base_npv: float
    adjusted_npv: float
    impact_pct: float
    recommendation: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'scenario_name': self.scenario.name,
            'scenario_type': self.scenario.scenario_type.value,
            'base_bc_ratio': self.base_bc_ratio,
            'adjusted_bc_ratio': self.adjusted_bc_ratio,
            'base_payback': self.base_payback,
            'adjusted_payback': self.adjusted_payback,
            'base_npv': self.base_npv,
            'adjusted_npv': self.adjusted_npv,
            'impact_pct': self.impact_pct,
            'recommendation': self.recommendation,
        }


class SensitivityAnalyzer:
    """Analyzer for what-if scenarios on a completed economic analysis."""

    def __init__(self, rates: CostRates = DEFAULT_COST_RATES):
        self.engine = EconomicsEngine(rates)
        self.results: List[SensitivityResult] = []

    def clear(self) -> None:
        """Drop recorded results so a long-lived analyzer can be reused."""
        self.results.clear()

    def _rerun(self, base: EconomicAnalysis, **changes) -> EconomicAnalysis:
        params = {
            'capital': base.capital_cost,
            'annual_benefit': base.total_annual_benefits,
            'horizon_years': base.horizon_years,
            'discount_rate': base.discount_rate,
            'subsidy_fraction': base.subsidy_fraction,
        }
        params.update(changes)
        return self.engine.analyze_capital(**params)

    def _compare(self, scenario: Scenario, base: EconomicAnalysis,
                 adjusted: EconomicAnalysis, recommendation: str) -> SensitivityResult:
        base_ratio = base.bc_ratio_with_subsidy
        new_ratio = adjusted.bc_ratio_with_subsidy
        if 0 < base_ratio < math.inf and new_ratio < math.inf:
            impact = (new_ratio - base_ratio) / base_ratio * 100
        else:
            impact = 0.0

        result = SensitivityResult(
            scenario=scenario,
            base_bc_ratio=base_ratio,
            adjusted_bc_ratio=new_ratio,
            base_payback=base.payback_period_with_subsidy,
            adjusted_payback=adjusted.payback_period_with_subsidy,
            base_npv=base.net_present_value,
            adjusted_npv=adjusted.net_present_value,
            impact_pct=impact,
            recommendation=recommendation,
        )
        self.results.append(result)
        return result

    def analyze_subsidy(self, base: EconomicAnalysis, new_subsidy: float) -> SensitivityResult:
        """Analyze impact of a different capital subsidy."""
        adjusted = self._rerun(base, subsidy_fraction=new_subsidy)
        saved = base.capital_cost * (new_subsidy - base.subsidy_fraction)

        if new_subsidy > base.subsidy_fraction:
            rec = (f"Subsidy of {new_subsidy*100:.0f}% lowers owner outlay by {saved:,.0f} "
                   f"and payback to {adjusted.payback_period_with_subsidy:.1f} years")
        else:
            rec = f"Subsidy of {new_subsidy*100:.0f}% raises owner outlay by {-saved:,.0f}"

        scenario = Scenario(
            name=f"Subsidy: {base.subsidy_fraction*100:.0f}% → {new_subsidy*100:.0f}%",
            scenario_type=ScenarioType.SUBSIDY,
            base_value=base.subsidy_fraction,
            adjusted_value=new_subsidy,
            description="Impact of capital subsidy on owner B/C ratio and payback",
        )
        return self._compare(scenario, base, adjusted, rec)

    def analyze_discount_rate(self, base: EconomicAnalysis, new_rate: float) -> SensitivityResult:
        """Analyze impact of a different discount rate on NPV."""
        adjusted = self._rerun(base, discount_rate=new_rate)
        npv_change = adjusted.net_present_value - base.net_present_value

        if adjusted.net_present_value >= 0:
            rec = f"NPV stays positive at {new_rate*100:.1f}% ({adjusted.net_present_value:,.0f})"
        else:
            rec = f"NPV turns negative at {new_rate*100:.1f}% (change of {npv_change:,.0f})"

        scenario = Scenario(
            name=f"Discount Rate: {base.discount_rate*100:.1f}% → {new_rate*100:.1f}%",
            scenario_type=ScenarioType.DISCOUNT_RATE,
            base_value=base.discount_rate,
            adjusted_value=new_rate,
            description="Impact of discount rate on net present value",
        )
        return self._compare(scenario, base, adjusted, rec)

    def analyze_capital_cost(self, base: EconomicAnalysis, change_pct: float) -> SensitivityResult:
        """Analyze impact of construction cost overrun or savings."""
        new_cost = base.capital_cost * (1 + change_pct / 100)
        adjusted = self._rerun(base, capital=new_cost)
        cost_diff = new_cost - base.capital_cost

        if change_pct > 0:
            rec = (f"Cost increase of {cost_diff:,.0f} reduces B/C ratio to "
                   f"{adjusted.bc_ratio_with_subsidy:.2f}")
        else:
            rec = (f"Cost savings of {-cost_diff:,.0f} improves B/C ratio to "
                   f"{adjusted.bc_ratio_with_subsidy:.2f}")

        scenario = Scenario(
            name=f"Capital Cost: {change_pct:+.1f}%",
            scenario_type=ScenarioType.CAPITAL_COST,
            base_value=base.capital_cost,
            adjusted_value=new_cost,
            description="Impact of capital cost variance",
        )
        return self._compare(scenario, base, adjusted, rec)

    def analyze_annual_benefit(self, base: EconomicAnalysis, change_pct: float) -> SensitivityResult:
        """Analyze impact of a higher or lower annual benefit (e.g. a dry year)."""
        new_benefit = base.total_annual_benefits * (1 + change_pct / 100)
        adjusted = self._rerun(base, annual_benefit=new_benefit)

        if change_pct < 0:
            rec = (f"Benefit drop of {-change_pct:.0f}% stretches payback to "
                   f"{adjusted.payback_period_with_subsidy:.1f} years")
        else:
            rec = (f"Benefit gain of {change_pct:.0f}% shortens payback to "
                   f"{adjusted.payback_period_with_subsidy:.1f} years")

        scenario = Scenario(
            name=f"Annual Benefit: {change_pct:+.1f}%",
            scenario_type=ScenarioType.ANNUAL_BENEFIT,
            base_value=base.total_annual_benefits,
            adjusted_value=new_benefit,
            description="Impact of annual benefit variance",
        )
        return self._compare(scenario, base, adjusted, rec)

    def generate_scenario_matrix(self, base: EconomicAnalysis) -> List[SensitivityResult]:
        """Generate the standard set of scenarios around a base analysis."""
        scenarios = []

        for subsidy in [0.25, 0.5, 0.75]:
            if subsidy != base.subsidy_fraction:
                scenarios.append(self.analyze_subsidy(base, subsidy))

        for delta in [-0.02, 0.02, 0.04]:
            new_rate = base.discount_rate + delta
            if new_rate > -1:
                scenarios.append(self.analyze_discount_rate(base, new_rate))

        for pct in [-10, 10, 20]:
            scenarios.append(self.analyze_capital_cost(base, pct))

        for pct in [-20, -10, 10]:
            scenarios.append(self.analyze_annual_benefit(base, pct))

        log.debug(f"Generated {len(scenarios)} sensitivity scenarios")
        return scenarios


def get_sensitivity_analyzer(rates: CostRates = DEFAULT_COST_RATES) -> SensitivityAnalyzer:
    """Factory function for sensitivity analyzer."""
    return SensitivityAnalyzer(rates)
