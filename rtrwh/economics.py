"""
Economic Analysis Engine - Viability of an RTRWH investment.

Takes the capital cost from a CostBreakdown plus an annual benefit estimate
and produces the annualized cost of capital, benefit-cost ratio, simple
payback, subsidy scenario and net present value over the project horizon.
"""

import math
import numbers
import logging
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any

import numpy as np
import pandas as pd

from rtrwh.costing import CostBreakdown
from rtrwh.exceptions import InvalidInputError, require_non_negative, require_range
from rtrwh.tables import CostRates, DEFAULT_COST_RATES

log = logging.getLogger(__name__)

DEFAULT_HORIZON_YEARS = 20
DEFAULT_DISCOUNT_RATE = 0.08


# ═══════════════════════════════════════════════════════════════════════════
# BENEFITS
# ═══════════════════════════════════════════════════════════════════════════
@dataclass(frozen=True)
class BenefitInputs:
    """Quantities the annual benefit is estimated from."""
    water_savings_volume: float              # L/year no longer bought
    depth_reduction: Optional[float] = None  # m rise in the water table


@dataclass(frozen=True)
class AnnualBenefits:
    water_cost_savings: float = 0.0
    energy_savings: float = 0.0
    pump_maintenance_savings: float = 0.0

    @property
    def total(self) -> float:
        return self.water_cost_savings + self.energy_savings + self.pump_maintenance_savings

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["total"] = self.total
        return data


def calculate_annual_benefits(inputs: BenefitInputs,
                              rates: CostRates = DEFAULT_COST_RATES) -> AnnualBenefits:
    """
    Estimate yearly savings from harvested water.

    Water savings are valued at the alternative source price. When the water
    table has risen, pumping energy and pump maintenance are saved as well.
    """
    require_non_negative("water_savings_volume", inputs.water_savings_volume)
    b = rates.benefit
    volume_m3 = inputs.water_savings_volume / 1000

    energy = 0.0
    pump = 0.0
    if inputs.depth_reduction is not None and inputs.depth_reduction > 0:
        energy = volume_m3 * b.pumping_kwh_per_m3 * b.energy_per_kwh
        pump = b.pump_maintenance_savings

    return AnnualBenefits(
        water_cost_savings=volume_m3 * b.alternative_source_per_m3,
        energy_savings=energy,
        pump_maintenance_savings=pump,
    )


# ═══════════════════════════════════════════════════════════════════════════
# COSTS
# ═══════════════════════════════════════════════════════════════════════════
@dataclass(frozen=True)
class AnnualCosts:
    """Annualized cost of capital components."""
    interest_loss: float = 0.0
    maintenance_repair: float = 0.0
    depreciation: float = 0.0
    miscellaneous: float = 0.0

    @property
    def total(self) -> float:
        return self.interest_loss + self.maintenance_repair + self.depreciation + self.miscellaneous


def calculate_annual_costs(capital_cost: float,
                           rates: CostRates = DEFAULT_COST_RATES) -> AnnualCosts:
    r = rates.annual_cost
    return AnnualCosts(
        interest_loss=capital_cost * r.interest,
        maintenance_repair=capital_cost * r.maintenance_repair,
        depreciation=capital_cost * r.depreciation,
        miscellaneous=capital_cost * r.miscellaneous,
    )


def calculate_annual_maintenance_cost(rates: CostRates = DEFAULT_COST_RATES) -> float:
    """Cleaning + disinfection + filter replacement amortized over its interval."""
    m = rates.maintenance
    return m.annual_cleaning + m.disinfection + m.filter_replacement / m.filter_replacement_years


# ═══════════════════════════════════════════════════════════════════════════
# INDICATORS
# ═══════════════════════════════════════════════════════════════════════════
def calculate_payback_period(capital_cost: float, net_annual_benefit: float) -> float:
    """Years to recover capital; infinite when the system never pays back."""
    if net_annual_benefit <= 0:
        return math.inf
    return capital_cost / net_annual_benefit


def calculate_bc_ratio(annual_benefit: float, annualized_cost: float) -> float:
    if annualized_cost <= 0:
        return math.inf
    return annual_benefit / annualized_cost


def discount_factors(horizon_years: int, discount_rate: float) -> np.ndarray:
    years = np.arange(1, horizon_years + 1)
    return 1.0 / np.power(1.0 + discount_rate, years)


def calculate_npv(capital_cost: float, net_annual_benefit: float,
                  horizon_years: int = DEFAULT_HORIZON_YEARS,
                  discount_rate: float = DEFAULT_DISCOUNT_RATE) -> float:
    """-capital + sum of discounted net benefits for years 1..horizon."""
    factors = discount_factors(horizon_years, discount_rate)
    return -capital_cost + float(np.sum(net_annual_benefit * factors))


def validate_economic_parameters(horizon_years: int, discount_rate: float,
                                 subsidy_fraction: float) -> None:
    if (isinstance(horizon_years, bool) or not isinstance(horizon_years, numbers.Integral)
            or horizon_years < 1):
        raise InvalidInputError("horizon_years", horizon_years, "must be a whole number of years >= 1")
    if not discount_rate > -1:
        raise InvalidInputError("discount_rate", discount_rate, "must be greater than -1")
    require_range("subsidy_fraction", subsidy_fraction, 0.0, 1.0)


# ═══════════════════════════════════════════════════════════════════════════
# ANALYSIS
# ═══════════════════════════════════════════════════════════════════════════
@dataclass(frozen=True)
class EconomicAnalysis:
    """Multi-year economic indicators for one design."""
    capital_cost: float
    annual_maintenance_cost: float
    annual_water_savings: float
    annual_energy_savings: float
    total_annual_benefits: float
    annual_cost_of_expenditure: float
    bc_ratio: float
    payback_period: float
    net_present_value: float
    bc_ratio_with_subsidy: float
    payback_period_with_subsidy: float
    horizon_years: int = DEFAULT_HORIZON_YEARS
    discount_rate: float = DEFAULT_DISCOUNT_RATE
    subsidy_fraction: float = 0.0

    @property
    def net_annual_benefit(self) -> float:
        return self.total_annual_benefits - self.annual_maintenance_cost

    @property
    def capital_cost_with_subsidy(self) -> float:
        return self.capital_cost * (1 - self.subsidy_fraction)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class EconomicsEngine:
    """Engine for the benefit-cost and cash-flow analysis."""

    def __init__(self, rates: CostRates = DEFAULT_COST_RATES):
        self.rates = rates

    def analyze(self, cost_breakdown: CostBreakdown, annual_benefit: float,
                horizon_years: int = DEFAULT_HORIZON_YEARS,
                discount_rate: float = DEFAULT_DISCOUNT_RATE,
                subsidy_fraction: float = 0.0) -> EconomicAnalysis:
        """Calculate every economic indicator for the given capital cost and benefit."""
        return self.analyze_capital(
            cost_breakdown.total_cost, annual_benefit,
            horizon_years, discount_rate, subsidy_fraction,
        )

    def analyze_capital(self, capital: float, annual_benefit: float,
                        horizon_years: int = DEFAULT_HORIZON_YEARS,
                        discount_rate: float = DEFAULT_DISCOUNT_RATE,
                        subsidy_fraction: float = 0.0) -> EconomicAnalysis:
        validate_economic_parameters(horizon_years, discount_rate, subsidy_fraction)
        horizon_years = int(horizon_years)
        require_non_negative("capital_cost", capital)
        require_non_negative("annual_benefit", annual_benefit)

        annualized = calculate_annual_costs(capital, self.rates).total
        maintenance = calculate_annual_maintenance_cost(self.rates)
        net_benefit = annual_benefit - maintenance
        water_share = self.rates.benefit.water_savings_share

        analysis = EconomicAnalysis(
            capital_cost=capital,
            annual_maintenance_cost=maintenance,
            annual_water_savings=annual_benefit * water_share,
            annual_energy_savings=annual_benefit * (1 - water_share),
            total_annual_benefits=annual_benefit,
            annual_cost_of_expenditure=annualized,
            bc_ratio=calculate_bc_ratio(annual_benefit, annualized),
            payback_period=calculate_payback_period(capital, net_benefit),
            net_present_value=calculate_npv(capital, net_benefit, horizon_years, discount_rate),
            bc_ratio_with_subsidy=calculate_bc_ratio(annual_benefit, annualized * (1 - subsidy_fraction)),
            payback_period_with_subsidy=calculate_payback_period(capital * (1 - subsidy_fraction), net_benefit),
            horizon_years=horizon_years,
            discount_rate=discount_rate,
            subsidy_fraction=subsidy_fraction,
        )

        if math.isinf(analysis.payback_period):
            log.warning(
                f"Annual benefit {annual_benefit:,.0f} does not cover maintenance "
                f"{maintenance:,.0f}; payback reported as infinite"
            )
        log.debug(
            f"Economics: capital={capital:,.0f} B/C={analysis.bc_ratio:.2f} "
            f"payback={analysis.payback_period:.1f}y NPV={analysis.net_present_value:,.0f}"
        )
        return analysis


def recovery_timeline(analysis: EconomicAnalysis) -> pd.DataFrame:
    """
    Year-by-year investment recovery table.

    The cumulative positions start from the negative capital outlay (with
    and without subsidy); the last cumulative_discounted value equals the NPV.
    """
    horizon = analysis.horizon_years
    net = analysis.net_annual_benefit
    factors = discount_factors(horizon, analysis.discount_rate)
    net_series = np.full(horizon, net, dtype=float)
    discounted = net_series * factors

    return pd.DataFrame({
        "year": np.arange(1, horizon + 1),
        "net_benefit": net_series,
        "discount_factor": factors,
        "discounted_net_benefit": discounted,
        "cumulative_net": -analysis.capital_cost + np.cumsum(net_series),
        "cumulative_net_with_subsidy": -analysis.capital_cost_with_subsidy + np.cumsum(net_series),
        "cumulative_discounted": -analysis.capital_cost + np.cumsum(discounted),
    })


def get_economics_engine(rates: CostRates = DEFAULT_COST_RATES) -> EconomicsEngine:
    """Factory function for economics engine."""
    return EconomicsEngine(rates)
