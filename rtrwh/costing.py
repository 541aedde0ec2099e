"""
Cost Estimation - Itemized capital cost of an RTRWH design.

Each component is priced independently from the CostRates schedule. Labor is
a fixed fraction of the material subtotal and the total is the sum of all
six items.
"""

import math
import logging
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any, List, Tuple, Union

from rtrwh.exceptions import require_non_negative
from rtrwh.models import DesignResult, FilterType, RechargeStructureType
from rtrwh.tables import CostRates, DEFAULT_COST_RATES

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CostInput:
    """Site quantities needed for costing that the design does not fix."""
    gutter_length: Optional[float] = None    # m, defaults from roof area
    downpipe_length: Optional[float] = None  # m
    depth_water_premonsoon: Optional[float] = None
    region: Optional[str] = None


@dataclass(frozen=True)
class CostBreakdown:
    """Itemized capital cost in currency units."""
    tank_cost: float = 0.0
    piping_cost: float = 0.0
    filter_cost: float = 0.0
    recharge_structure_cost: float = 0.0
    civil_works_cost: float = 0.0
    labor_cost: float = 0.0
    total_cost: float = 0.0

    @property
    def material_cost(self) -> float:
        return self.total_cost - self.labor_cost

    def line_items(self) -> List[Tuple[str, float]]:
        """Labelled rows in report order."""
        return [
            ("Storage Tank", self.tank_cost),
            ("Piping System", self.piping_cost),
            ("Filter Unit", self.filter_cost),
            ("Recharge Structure", self.recharge_structure_cost),
            ("Civil Works", self.civil_works_cost),
            ("Labor", self.labor_cost),
            ("Total Investment", self.total_cost),
        ]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def calculate_tank_cost(capacity: float, rates: CostRates = DEFAULT_COST_RATES) -> float:
    """Per-litre cost by the construction material suited to the capacity."""
    tank = rates.tank
    if capacity <= tank.ferrocement_max_l:
        return capacity * tank.ferrocement_per_l
    if capacity <= tank.masonry_max_l:
        return capacity * tank.masonry_per_l
    return capacity * tank.rcc_per_l


def calculate_piping_cost(gutter_length: float, downpipe_length: float,
                          rates: CostRates = DEFAULT_COST_RATES) -> float:
    piping = rates.piping
    return (gutter_length * piping.gutter_per_m
            + downpipe_length * piping.downpipe_per_m
            + piping.first_flush_device)


def calculate_filter_cost(filter_type: Union[FilterType, str], filter_area: float,
                          rates: CostRates = DEFAULT_COST_RATES) -> float:
    f = rates.filter
    base = f.slow_sand_base if filter_type == FilterType.SLOW_SAND else f.rapid_sand_base
    media_volume = filter_area * f.media_depth_m
    return base + media_volume * f.media_per_m3


def calculate_recharge_structure_cost(structure_type: Union[RechargeStructureType, str],
                                      depth: float, diameter: float,
                                      rates: CostRates = DEFAULT_COST_RATES) -> float:
    """
    Pits: excavation + filter media fill + masonry lining.
    Shafts: depth-proportional drilling cost + concrete casing.
    """
    volume = math.pi * (diameter / 2) ** 2 * depth
    lateral_area = math.pi * diameter * depth

    if RechargeStructureType(structure_type).is_pit:
        excavation = volume * rates.civil.excavation_per_m3
        media = volume * rates.recharge.filter_media_per_m3
        lining = lateral_area * rates.recharge.pit_lining_thickness_m * rates.civil.masonry_per_m3
        return excavation + media + lining

    base = depth / 10 * rates.recharge.shaft_per_10m
    casing = lateral_area * rates.recharge.shaft_casing_thickness_m * rates.civil.pcc_per_m3
    return base + casing


def equivalent_tank_diameter(capacity: float, height: float) -> float:
    """Diameter in m of a cylinder of the given height holding capacity litres."""
    return math.sqrt((capacity / 1000) / (math.pi * height)) * 2


def calculate_civil_works_cost(tank_diameter: float, tank_height: float,
                               rates: CostRates = DEFAULT_COST_RATES) -> float:
    """Excavation for the tank, a PCC foundation slab and plastering."""
    civil = rates.civil
    footprint = math.pi * (tank_diameter / 2) ** 2
    excavation = footprint * tank_height * civil.excavation_per_m3
    foundation = footprint * civil.foundation_thickness_m * civil.pcc_per_m3
    plastered_area = math.pi * tank_diameter * tank_height + footprint
    plastering = plastered_area * civil.plastering_per_m2
    return excavation + foundation + plastering


def calculate_labor_cost(material_cost: float, rates: CostRates = DEFAULT_COST_RATES) -> float:
    return material_cost * rates.labor_fraction


class CostEstimator:
    """Prices a DesignResult against a rate schedule."""

    def __init__(self, rates: CostRates = DEFAULT_COST_RATES):
        self.rates = rates

    def calculate(self, design: DesignResult, cost_input: Optional[CostInput] = None) -> CostBreakdown:
        cost_input = cost_input or CostInput()
        rates = self.rates

        gutter_length = cost_input.gutter_length
        if gutter_length is None:
            gutter_length = design.roof_area * rates.piping.gutter_length_per_m2_roof
        downpipe_length = cost_input.downpipe_length
        if downpipe_length is None:
            downpipe_length = rates.piping.default_downpipe_length_m
        require_non_negative("gutter_length", gutter_length)
        require_non_negative("downpipe_length", downpipe_length)

        factor = rates.regional_factor(cost_input.region)

        tank_cost = calculate_tank_cost(design.tank_capacity, rates) * factor
        piping_cost = calculate_piping_cost(gutter_length, downpipe_length, rates) * factor
        filter_cost = calculate_filter_cost(design.filter_type, design.filter_area, rates) * factor
        recharge_cost = calculate_recharge_structure_cost(
            design.recharge_structure_type,
            design.recharge_structure_depth,
            design.recharge_structure_diameter,
            rates,
        ) * factor
        civil_diameter = equivalent_tank_diameter(design.tank_capacity, design.tank_height)
        civil_cost = calculate_civil_works_cost(civil_diameter, design.tank_height, rates) * factor

        material_cost = tank_cost + piping_cost + filter_cost + recharge_cost + civil_cost
        labor_cost = calculate_labor_cost(material_cost, rates)

        breakdown = CostBreakdown(
            tank_cost=tank_cost,
            piping_cost=piping_cost,
            filter_cost=filter_cost,
            recharge_structure_cost=recharge_cost,
            civil_works_cost=civil_cost,
            labor_cost=labor_cost,
            total_cost=material_cost + labor_cost,
        )
        log.debug(f"Cost breakdown: total={breakdown.total_cost:,.0f} (region factor {factor})")
        return breakdown


def get_cost_estimator(rates: CostRates = DEFAULT_COST_RATES) -> CostEstimator:
    """Factory function for cost estimator."""
    return CostEstimator(rates)
