"""
RTRWH feasibility engine.
Sizes a rooftop rainwater harvesting system and evaluates its economics.
"""

from rtrwh.exceptions import InvalidInputError
from rtrwh.models import (
    ProjectInput, DesignResult, RoofType, AquiferType, FilterType, RechargeStructureType,
)
from rtrwh.tables import (
    DesignTables, CostRates, DEFAULT_DESIGN_TABLES, DEFAULT_COST_RATES,
    load_cost_rates, save_cost_rates, select_tier,
)
from rtrwh.design import DesignEngine, get_design_engine
from rtrwh.costing import CostInput, CostBreakdown, CostEstimator, get_cost_estimator
from rtrwh.economics import (
    BenefitInputs, AnnualBenefits, EconomicAnalysis, EconomicsEngine,
    calculate_annual_benefits, recovery_timeline, get_economics_engine,
)
from rtrwh.viability import ViabilityCategory, ViabilityAssessment, assess_viability
from rtrwh.sensitivity import SensitivityAnalyzer, get_sensitivity_analyzer
from rtrwh.pipeline import (
    Assessment, CostAndEconomics, compute_design, compute_cost_and_economics, assess_project,
)

__all__ = [
    "InvalidInputError",
    # Models
    "ProjectInput",
    "DesignResult",
    "RoofType",
    "AquiferType",
    "FilterType",
    "RechargeStructureType",
    # Configuration
    "DesignTables",
    "CostRates",
    "DEFAULT_DESIGN_TABLES",
    "DEFAULT_COST_RATES",
    "load_cost_rates",
    "save_cost_rates",
    "select_tier",
    # Engines
    "DesignEngine",
    "get_design_engine",
    "CostInput",
    "CostBreakdown",
    "CostEstimator",
    "get_cost_estimator",
    "BenefitInputs",
    "AnnualBenefits",
    "EconomicAnalysis",
    "EconomicsEngine",
    "calculate_annual_benefits",
    "recovery_timeline",
    "get_economics_engine",
    "ViabilityCategory",
    "ViabilityAssessment",
    "assess_viability",
    "SensitivityAnalyzer",
    "get_sensitivity_analyzer",
    # Pipeline
    "Assessment",
    "CostAndEconomics",
    "compute_design",
    "compute_cost_and_economics",
    "assess_project",
]
