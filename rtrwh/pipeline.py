"""
Assessment Pipeline - The operations exposed to the embedding application.

compute_design() and compute_cost_and_economics() are the two stages;
assess_project() chains them the way a full site assessment does, filling in
the cost and benefit quantities from the design and the site input.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Dict, Any

from rtrwh.costing import CostBreakdown, CostEstimator, CostInput
from rtrwh.design import DesignEngine
from rtrwh.economics import (
    BenefitInputs, EconomicAnalysis, EconomicsEngine, AnnualBenefits,
    calculate_annual_benefits, DEFAULT_HORIZON_YEARS, DEFAULT_DISCOUNT_RATE,
)
from rtrwh.models import ProjectInput, DesignResult
from rtrwh.tables import DesignTables, CostRates, DEFAULT_DESIGN_TABLES, DEFAULT_COST_RATES
from rtrwh.viability import ViabilityAssessment, assess_viability

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CostAndEconomics:
    """Output of the costing stage."""
    cost_breakdown: CostBreakdown
    economic_analysis: EconomicAnalysis
    annual_benefits: AnnualBenefits

    def to_dict(self) -> Dict[str, Any]:
        return {
            'cost_breakdown': self.cost_breakdown.to_dict(),
            'economic_analysis': self.economic_analysis.to_dict(),
            'annual_benefits': self.annual_benefits.to_dict(),
        }


@dataclass(frozen=True)
class Assessment:
    """Everything derived for one project, ready to persist or render."""
    project_input: ProjectInput
    design: DesignResult
    cost_breakdown: CostBreakdown
    economic_analysis: EconomicAnalysis
    annual_benefits: AnnualBenefits
    viability: ViabilityAssessment

    def to_dict(self) -> Dict[str, Any]:
        return {
            'project_input': self.project_input.to_dict(),
            'design': self.design.to_dict(),
            'cost_breakdown': self.cost_breakdown.to_dict(),
            'economic_analysis': self.economic_analysis.to_dict(),
            'annual_benefits': self.annual_benefits.to_dict(),
            'viability': self.viability.to_dict(),
        }


def compute_design(inputs: ProjectInput,
                   tables: DesignTables = DEFAULT_DESIGN_TABLES) -> DesignResult:
    """Derive the complete engineering design for a site."""
    return DesignEngine(tables).calculate(inputs)


def compute_cost_and_economics(design: DesignResult,
                               cost_input: CostInput,
                               benefit_inputs: BenefitInputs,
                               horizon_years: int = DEFAULT_HORIZON_YEARS,
                               discount_rate: float = DEFAULT_DISCOUNT_RATE,
                               subsidy_fraction: float = 0.0,
                               rates: CostRates = DEFAULT_COST_RATES) -> CostAndEconomics:
    """Price a design and run the multi-year economic analysis on it."""
    breakdown = CostEstimator(rates).calculate(design, cost_input)
    benefits = calculate_annual_benefits(benefit_inputs, rates)
    analysis = EconomicsEngine(rates).analyze(
        breakdown, benefits.total, horizon_years, discount_rate, subsidy_fraction
    )
    return CostAndEconomics(
        cost_breakdown=breakdown,
        economic_analysis=analysis,
        annual_benefits=benefits,
    )


def assess_project(inputs: ProjectInput,
                   cost_input: Optional[CostInput] = None,
                   horizon_years: int = DEFAULT_HORIZON_YEARS,
                   discount_rate: float = DEFAULT_DISCOUNT_RATE,
                   subsidy_fraction: float = 0.0,
                   tables: DesignTables = DEFAULT_DESIGN_TABLES,
                   rates: CostRates = DEFAULT_COST_RATES) -> Assessment:
    """
    Run a complete assessment: design, cost, economics and viability.

    The harvested volume counted as a benefit is the demand when the roof
    can meet it, otherwise whatever the roof yields. The water table rise is
    taken from the pre/post-monsoon readings when both are present.
    """
    design = compute_design(inputs, tables)

    if cost_input is None:
        cost_input = CostInput(depth_water_premonsoon=inputs.depth_water_premonsoon)
    benefit_inputs = BenefitInputs(
        water_savings_volume=design.storage_target,
        depth_reduction=inputs.depth_reduction,
    )

    result = compute_cost_and_economics(
        design, cost_input, benefit_inputs,
        horizon_years, discount_rate, subsidy_fraction, rates,
    )
    analysis = result.economic_analysis
    viability = assess_viability(analysis.bc_ratio, analysis.payback_period)

    if viability.is_viable:
        log.info(f"Assessment complete: {viability.category.value} (B/C {analysis.bc_ratio:.2f})")
    else:
        log.warning(f"Assessment complete: not viable (B/C {analysis.bc_ratio:.2f})")

    return Assessment(
        project_input=inputs,
        design=design,
        cost_breakdown=result.cost_breakdown,
        economic_analysis=analysis,
        annual_benefits=result.annual_benefits,
        viability=viability,
    )
