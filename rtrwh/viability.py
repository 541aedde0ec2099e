"""
Viability classification from benefit-cost ratio and payback period.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any, Tuple


class ViabilityCategory(Enum):
    HIGHLY_VIABLE = "Highly Viable"
    VIABLE = "Viable"
    MARGINALLY_VIABLE = "Marginally Viable"
    NOT_VIABLE = "Not Viable"


@dataclass(frozen=True)
class ViabilityAssessment:
    is_viable: bool
    category: ViabilityCategory
    recommendation: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'is_viable': self.is_viable,
            'category': self.category.value,
            'recommendation': self.recommendation,
        }


# (minimum B/C ratio, maximum payback years, category, recommendation), best first
VIABILITY_THRESHOLDS: Tuple[Tuple[float, float, ViabilityCategory, str], ...] = (
    (1.5, 10, ViabilityCategory.HIGHLY_VIABLE,
     "Excellent investment with strong economic returns. Proceed with implementation."),
    (1.0, 15, ViabilityCategory.VIABLE,
     "Good investment with positive returns. Recommended for implementation."),
    (0.75, 20, ViabilityCategory.MARGINALLY_VIABLE,
     "Acceptable for social/environmental projects. Consider with subsidy support."),
)

NOT_VIABLE_RECOMMENDATION = (
    "Economic returns are low. Consider alternative solutions or wait for better subsidy schemes."
)


def assess_viability(bc_ratio: float, payback_period: float) -> ViabilityAssessment:
    """Map a (B/C ratio, payback) pair onto the first category whose thresholds it meets."""
    for min_ratio, max_payback, category, recommendation in VIABILITY_THRESHOLDS:
        if bc_ratio >= min_ratio and payback_period <= max_payback:
            return ViabilityAssessment(True, category, recommendation)
    return ViabilityAssessment(False, ViabilityCategory.NOT_VIABLE, NOT_VIABLE_RECOMMENDATION)
