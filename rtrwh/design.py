"""
Engineering Design Engine - Rooftop rainwater harvesting system sizing.

Turns a ProjectInput into a DesignResult through a fixed chain of formulas
and table lookups: water balance, storage tank, collection piping, filter
and groundwater recharge structure, followed by site warnings and
recommendations. Each stage is a plain function so it can be tested on its
own; DesignEngine.calculate() runs them in order.
"""

import math
import numbers
import logging
from dataclasses import replace
from typing import List, Optional, Tuple, Union

from rtrwh.exceptions import InvalidInputError, require_positive, require_range
from rtrwh.models import (
    ProjectInput, DesignResult, RoofType, AquiferType, FilterType,
    RechargeStructureType,
)
from rtrwh.tables import DesignTables, DEFAULT_DESIGN_TABLES, select_tier

log = logging.getLogger(__name__)


def validate_project_input(inputs: ProjectInput) -> None:
    """Reject inputs that would make the design meaningless."""
    require_positive("roof_area", inputs.roof_area)
    require_positive("household_size", inputs.household_size)
    if isinstance(inputs.household_size, bool) or not isinstance(inputs.household_size, numbers.Integral):
        raise InvalidInputError("household_size", inputs.household_size, "must be a whole number of people")
    require_positive("annual_rainfall", inputs.annual_rainfall)
    require_positive("rainfall_intensity", inputs.rainfall_intensity)
    require_range("water_scarcity_days", inputs.water_scarcity_days, 0, 365)
    try:
        AquiferType(inputs.aquifer_type)
    except ValueError:
        raise InvalidInputError(
            "aquifer_type", inputs.aquifer_type,
            f"must be one of {[a.value for a in AquiferType]}"
        ) from None
    for name in ("depth_water_premonsoon", "depth_water_postmonsoon"):
        depth = getattr(inputs, name)
        if depth is not None and not depth >= 0:
            raise InvalidInputError(name, depth, "must not be negative")


# ═══════════════════════════════════════════════════════════════════════════
# WATER BALANCE
# ═══════════════════════════════════════════════════════════════════════════
def runoff_coefficient(roof_type: Union[RoofType, str],
                       tables: DesignTables = DEFAULT_DESIGN_TABLES) -> float:
    key = roof_type.value if isinstance(roof_type, RoofType) else roof_type
    return tables.runoff_coefficients.get(key, tables.default_runoff_coefficient)


def calculate_water_available(roof_area: float, annual_rainfall: float,
                              roof_type: Union[RoofType, str],
                              tables: DesignTables = DEFAULT_DESIGN_TABLES) -> float:
    """Annual harvestable volume in litres (1 mm on 1 m² is 1 L)."""
    return roof_area * annual_rainfall * runoff_coefficient(roof_type, tables)


def calculate_water_required(household_size: int, water_scarcity_days: float,
                             tables: DesignTables = DEFAULT_DESIGN_TABLES) -> float:
    """Drinking-water demand over the scarcity period in litres."""
    return household_size * water_scarcity_days * tables.per_capita_demand_lpd


# ═══════════════════════════════════════════════════════════════════════════
# STORAGE
# ═══════════════════════════════════════════════════════════════════════════
def calculate_tank_capacity(target_volume: float,
                            tables: DesignTables = DEFAULT_DESIGN_TABLES) -> float:
    """Round the storage target up to the next whole tank increment."""
    step = tables.tank_rounding_l
    return math.ceil(target_volume / step) * step


def get_tank_dimensions(capacity: float,
                        tables: DesignTables = DEFAULT_DESIGN_TABLES) -> Tuple[float, float]:
    """
    Pick (diameter, height) from the standard tank sizes.

    Capacities beyond the largest standard size get the largest size's
    diameter; no extrapolation is applied.
    """
    largest = tables.tank_sizes[-1][0]
    if capacity > largest:
        log.warning(
            f"Tank capacity {capacity:.0f} L exceeds largest standard size "
            f"{largest:.0f} L; diameter capped at largest tier"
        )
    return select_tier(tables.tank_sizes, capacity), tables.tank_height_m


# ═══════════════════════════════════════════════════════════════════════════
# COLLECTION
# ═══════════════════════════════════════════════════════════════════════════
def calculate_peak_flow(roof_area: float, rainfall_intensity: float,
                        roof_type: Union[RoofType, str],
                        tables: DesignTables = DEFAULT_DESIGN_TABLES) -> float:
    """Peak runoff in L/s for the design storm intensity (mm/hr)."""
    return roof_area * rainfall_intensity * runoff_coefficient(roof_type, tables) / 3600


def get_gutter_diameter(peak_flow: float,
                        tables: DesignTables = DEFAULT_DESIGN_TABLES) -> float:
    return select_tier(tables.gutter_capacities, peak_flow)


def get_downpipe_diameter(peak_flow: float,
                          tables: DesignTables = DEFAULT_DESIGN_TABLES) -> float:
    return select_tier(tables.downpipe_sizes, peak_flow)


def calculate_first_flush_volume(roof_area: float,
                                 tables: DesignTables = DEFAULT_DESIGN_TABLES) -> float:
    return roof_area * tables.first_flush_mm


def calculate_first_flush_pipe_length(volume: float, pipe_diameter: float) -> float:
    """Length in m of a pipe of the given diameter (mm) holding volume (L)."""
    radius = pipe_diameter / 2000
    return volume / 1000 / (math.pi * radius * radius)


# ═══════════════════════════════════════════════════════════════════════════
# TREATMENT
# ═══════════════════════════════════════════════════════════════════════════
def get_filter_type(peak_flow: float,
                    tables: DesignTables = DEFAULT_DESIGN_TABLES) -> FilterType:
    if peak_flow > tables.rapid_sand_threshold_lps:
        return FilterType.RAPID_SAND
    return FilterType.SLOW_SAND


def calculate_filter_area(peak_flow: float, filter_type: FilterType,
                          tables: DesignTables = DEFAULT_DESIGN_TABLES) -> float:
    if filter_type == FilterType.SLOW_SAND:
        rate = tables.slow_sand_rate_lphm2
    else:
        rate = tables.rapid_sand_rate_lphm2
    return peak_flow * 3600 / rate


def get_filter_dimensions(area: float) -> Tuple[float, float]:
    """Square filter bed, side rounded up to the next 0.1 m."""
    side = math.ceil(math.sqrt(area) * 10) / 10
    return side, side


# ═══════════════════════════════════════════════════════════════════════════
# RECHARGE
# ═══════════════════════════════════════════════════════════════════════════
def _has_depth(depth: Optional[float]) -> bool:
    # A zero reading means the depth was not measured.
    return depth is not None and depth > 0


def get_recharge_structure_type(aquifer_type: Union[AquiferType, str],
                                depth_water: Optional[float] = None,
                                tables: DesignTables = DEFAULT_DESIGN_TABLES) -> RechargeStructureType:
    """
    Choose a recharge structure from the pre-monsoon water table depth.

    Without a depth reading the choice follows the aquifer class. With one,
    the depth alone decides and the aquifer class is not consulted.
    """
    if not _has_depth(depth_water):
        if aquifer_type == AquiferType.CONSOLIDATED:
            return RechargeStructureType.SHAFT
        return RechargeStructureType.PIT

    if depth_water < tables.shallow_water_table_m:
        return RechargeStructureType.SHALLOW_PIT
    if depth_water < tables.deep_water_table_m:
        return RechargeStructureType.PIT
    return RechargeStructureType.SHAFT


def get_recharge_structure_dimensions(structure_type: RechargeStructureType,
                                      depth_water: Optional[float] = None,
                                      tables: DesignTables = DEFAULT_DESIGN_TABLES) -> Tuple[float, float]:
    """Return (depth, diameter) in metres for the chosen structure."""
    measured = _has_depth(depth_water)
    if structure_type.is_pit:
        if measured:
            depth = max(depth_water - tables.pit_clearance_m, 0.0)
        else:
            depth = tables.pit_default_depth_m
        return min(depth, tables.pit_max_depth_m), tables.pit_diameter_m

    if measured:
        depth = depth_water + tables.shaft_penetration_m
    else:
        depth = tables.shaft_default_depth_m
    return min(depth, tables.shaft_max_depth_m), tables.shaft_diameter_m


# ═══════════════════════════════════════════════════════════════════════════
# ADVISORY NOTES
# ═══════════════════════════════════════════════════════════════════════════
def generate_warnings(inputs: ProjectInput, design: DesignResult,
                      tables: DesignTables = DEFAULT_DESIGN_TABLES) -> List[str]:
    warnings = []

    if inputs.annual_rainfall < tables.low_rainfall_mm:
        warnings.append("Low rainfall area (<500mm) - Storage system recommended over direct recharge")

    if _has_depth(inputs.depth_water_premonsoon) and inputs.depth_water_premonsoon < tables.waterlogging_depth_m:
        warnings.append("Shallow water table (<3m) - Risk of water logging, avoid recharge pits")

    if inputs.roof_area < tables.small_roof_m2:
        warnings.append("Small roof area - System may not be economically viable")

    if not design.is_feasible:
        warnings.append("Water available from roof is insufficient for full scarcity period")

    if design.peak_flow > tables.high_peak_flow_lps:
        warnings.append("High peak flow - Consider multiple collection points or larger piping system")

    if inputs.aquifer_type == AquiferType.CONSOLIDATED:
        warnings.append("Consolidated rock aquifer - Recharge shafts required instead of pits")

    return warnings


def generate_recommendations(inputs: ProjectInput, design: DesignResult,
                             tables: DesignTables = DEFAULT_DESIGN_TABLES) -> List[str]:
    recommendations = []

    if inputs.annual_rainfall > tables.high_rainfall_mm:
        recommendations.append("High rainfall area - Direct recharge to aquifer recommended in addition to storage")

    if design.is_feasible and design.water_available > design.water_required * tables.surplus_ratio:
        recommendations.append("Surplus water available - Consider artificial recharge structures for groundwater replenishment")

    if inputs.aquifer_type == AquiferType.UNCONSOLIDATED:
        recommendations.append("Unconsolidated aquifer - Excellent for artificial recharge through pits or shafts")

    if inputs.infiltration_rate and inputs.infiltration_rate > tables.high_infiltration_rate:
        recommendations.append("High infiltration rate - Suitable for percolation pits and direct recharge")

    recommendations.append("Implement pre-monsoon roof and gutter cleaning for optimal water quality")
    recommendations.append("Install mesh screens at gutter inlets to prevent debris entry")

    if design.tank_capacity > tables.large_tank_l:
        recommendations.append("Large storage capacity - Consider dividing into multiple tanks for better maintenance")

    return recommendations


# ═══════════════════════════════════════════════════════════════════════════
# ENGINE
# ═══════════════════════════════════════════════════════════════════════════
class DesignEngine:
    """Engine for sizing a complete RTRWH system."""

    def __init__(self, tables: DesignTables = DEFAULT_DESIGN_TABLES):
        self.tables = tables

    def calculate(self, inputs: ProjectInput) -> DesignResult:
        """Run every design stage in order and return the frozen result."""
        validate_project_input(inputs)
        t = self.tables

        # Water balance
        coefficient = runoff_coefficient(inputs.roof_type, t)
        available = calculate_water_available(
            inputs.roof_area, inputs.annual_rainfall, inputs.roof_type, t
        )
        required = calculate_water_required(
            inputs.household_size, inputs.water_scarcity_days, t
        )
        feasible = available >= required

        # Storage
        capacity = calculate_tank_capacity(required if feasible else available, t)
        tank_diameter, tank_height = get_tank_dimensions(capacity, t)

        # Collection
        peak = calculate_peak_flow(
            inputs.roof_area, inputs.rainfall_intensity, inputs.roof_type, t
        )
        downpipe = get_downpipe_diameter(peak, t)
        flush_volume = calculate_first_flush_volume(inputs.roof_area, t)

        # Treatment
        filter_type = get_filter_type(peak, t)
        filter_area = calculate_filter_area(peak, filter_type, t)
        filter_length, filter_width = get_filter_dimensions(filter_area)

        # Recharge
        structure = get_recharge_structure_type(
            inputs.aquifer_type, inputs.depth_water_premonsoon, t
        )
        structure_depth, structure_diameter = get_recharge_structure_dimensions(
            structure, inputs.depth_water_premonsoon, t
        )

        design = DesignResult(
            water_available=available,
            water_required=required,
            is_feasible=feasible,
            tank_capacity=capacity,
            tank_diameter=tank_diameter,
            tank_height=tank_height,
            peak_flow=peak,
            gutter_diameter=get_gutter_diameter(peak, t),
            downpipe_diameter=downpipe,
            first_flush_volume=flush_volume,
            first_flush_pipe_length=calculate_first_flush_pipe_length(flush_volume, downpipe),
            filter_type=filter_type,
            filter_area=filter_area,
            filter_length=filter_length,
            filter_width=filter_width,
            recharge_structure_type=structure,
            recharge_structure_depth=structure_depth,
            recharge_structure_diameter=structure_diameter,
            roof_area=inputs.roof_area,
            runoff_coefficient=coefficient,
        )
        design = replace(
            design,
            warnings=tuple(generate_warnings(inputs, design, t)),
            recommendations=tuple(generate_recommendations(inputs, design, t)),
        )

        log.debug(
            f"Design: available={available:.0f}L required={required:.0f}L "
            f"tank={capacity:.0f}L peak={peak:.2f}L/s filter={filter_type.value} "
            f"recharge={structure.value}"
        )
        if not feasible:
            log.info(
                f"Roof yield {available:.0f}L is below demand {required:.0f}L; "
                f"tank sized to available volume"
            )
        return design


def get_design_engine(tables: DesignTables = DEFAULT_DESIGN_TABLES) -> DesignEngine:
    """Factory function for the design engine."""
    return DesignEngine(tables)
