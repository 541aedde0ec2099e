"""
Lookup Tables and Rate Schedules

Static engineering tables (runoff coefficients, standard tank sizes, gutter
capacities) and the unit cost rates used for costing. Everything here is an
immutable value object; engines receive an instance at construction time so a
different rate schedule can be swapped in without touching module state.
"""

import json
import logging
from dataclasses import dataclass, field, asdict, fields, is_dataclass, replace
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Mapping, Tuple, Any, Sequence, Union

from rtrwh.exceptions import InvalidInputError

log = logging.getLogger(__name__)

Tier = Tuple[float, float]


def select_tier(tiers: Sequence[Tier], target: float) -> float:
    """
    Return the value of the first tier whose threshold is >= target.

    Tiers must be ordered by ascending threshold. When the target exceeds
    every threshold the last tier's value is returned, so the lookup never
    fails.
    """
    for threshold, value in tiers:
        if target <= threshold:
            return value
    return tiers[-1][1]


def _freeze_mapping(instance: Any, name: str) -> None:
    # Read-only view over a private copy of the caller's mapping.
    object.__setattr__(instance, name, MappingProxyType(dict(getattr(instance, name))))


def _to_float(path: str, value: Any) -> float:
    if isinstance(value, bool):
        raise InvalidInputError(path, value, "must be a number")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(path, value, "must be a number") from None


# ═══════════════════════════════════════════════════════════════════════════
# ENGINEERING DESIGN TABLES
# ═══════════════════════════════════════════════════════════════════════════
RUNOFF_COEFFICIENTS: Dict[str, float] = {
    "GI Sheet": 0.9,
    "Asbestos": 0.8,
    "Tiles": 0.75,
    "Concrete": 0.7,
}

# (capacity in litres, diameter in metres)
TANK_SIZES: Tuple[Tier, ...] = (
    (1600, 1.21),
    (2400, 1.48),
    (3200, 1.71),
    (4000, 1.91),
    (6400, 2.41),
    (8000, 2.70),
    (10000, 3.00),
    (12000, 3.30),
    (16000, 3.81),
    (20000, 4.26),
)

# (flow capacity in L/s, gutter diameter in mm)
GUTTER_CAPACITIES: Tuple[Tier, ...] = (
    (1.08, 100),
    (2.97, 150),
    (6.10, 200),
    (10.67, 250),
    (16.82, 300),
)

# (peak flow in L/s, downpipe diameter in mm)
DOWNPIPE_SIZES: Tuple[Tier, ...] = (
    (1.0, 50),
    (3.0, 75),
    (float("inf"), 100),
)


@dataclass(frozen=True)
class DesignTables:
    """
    All constants used by the design engine.

    Every value has an explicit unit in its name or docstring.
    """

    runoff_coefficients: Mapping[str, float] = field(
        default_factory=lambda: MappingProxyType(dict(RUNOFF_COEFFICIENTS)), hash=False
    )
    """Fraction of rainfall collected, by roof material."""

    default_runoff_coefficient: float = 0.7
    """Used when the roof material is not in the table."""

    per_capita_demand_lpd: float = 6.0
    """Drinking and cooking allowance in litres per person per day."""

    tank_rounding_l: float = 1000.0
    """Tank capacity is rounded up to a multiple of this many litres."""

    tank_sizes: Tuple[Tier, ...] = TANK_SIZES
    tank_height_m: float = 1.6

    gutter_capacities: Tuple[Tier, ...] = GUTTER_CAPACITIES
    downpipe_sizes: Tuple[Tier, ...] = DOWNPIPE_SIZES

    first_flush_mm: float = 0.5
    """Depth of initial runoff diverted away from storage (1 mm on 1 m² = 1 L)."""

    rapid_sand_threshold_lps: float = 2.0
    """Peak flows strictly above this need a rapid sand filter."""

    slow_sand_rate_lphm2: float = 150.0
    rapid_sand_rate_lphm2: float = 4500.0

    shallow_water_table_m: float = 5.0
    """Pre-monsoon depths below this get a shallow recharge pit."""

    deep_water_table_m: float = 15.0
    """Pre-monsoon depths at or beyond this need a recharge shaft."""

    pit_diameter_m: float = 1.5
    pit_default_depth_m: float = 3.0
    pit_max_depth_m: float = 5.0
    pit_clearance_m: float = 1.0
    """Pit bottom stays this far above the water table."""

    shaft_diameter_m: float = 0.75
    shaft_default_depth_m: float = 10.0
    shaft_max_depth_m: float = 15.0
    shaft_penetration_m: float = 2.0
    """Shaft extends this far below the water table."""

    # Warning and recommendation triggers
    low_rainfall_mm: float = 500.0
    high_rainfall_mm: float = 1000.0
    waterlogging_depth_m: float = 3.0
    small_roof_m2: float = 20.0
    high_peak_flow_lps: float = 10.0
    surplus_ratio: float = 1.5
    high_infiltration_rate: float = 20.0
    large_tank_l: float = 5000.0

    def __post_init__(self):
        _freeze_mapping(self, "runoff_coefficients")


DEFAULT_DESIGN_TABLES = DesignTables()


# ═══════════════════════════════════════════════════════════════════════════
# COST RATE SCHEDULE (currency units)
# ═══════════════════════════════════════════════════════════════════════════
@dataclass(frozen=True)
class TankRates:
    """Per-litre storage cost, tiered by construction material."""
    ferrocement_per_l: float = 13.0
    masonry_per_l: float = 11.0
    rcc_per_l: float = 17.0
    ferrocement_max_l: float = 15000.0
    masonry_max_l: float = 50000.0


@dataclass(frozen=True)
class PipingRates:
    gutter_per_m: float = 300.0
    downpipe_per_m: float = 200.0
    first_flush_device: float = 650.0
    default_downpipe_length_m: float = 5.0
    gutter_length_per_m2_roof: float = 0.4


@dataclass(frozen=True)
class FilterRates:
    slow_sand_base: float = 3000.0
    rapid_sand_base: float = 4000.0
    media_per_m3: float = 800.0
    media_depth_m: float = 0.9


@dataclass(frozen=True)
class RechargeRates:
    shaft_per_10m: float = 30000.0
    filter_media_per_m3: float = 800.0
    pit_lining_thickness_m: float = 0.23
    shaft_casing_thickness_m: float = 0.1


@dataclass(frozen=True)
class CivilRates:
    excavation_per_m3: float = 250.0
    masonry_per_m3: float = 500.0
    pcc_per_m3: float = 5500.0
    plastering_per_m2: float = 50.0
    foundation_thickness_m: float = 0.15


@dataclass(frozen=True)
class MaintenanceRates:
    annual_cleaning: float = 1500.0
    disinfection: float = 750.0
    filter_replacement: float = 3000.0
    filter_replacement_years: float = 3.0


@dataclass(frozen=True)
class BenefitRates:
    alternative_source_per_m3: float = 20.0
    """Price of buying the same water from a tanker or utility."""
    energy_per_kwh: float = 7.0
    pumping_kwh_per_m3: float = 0.5
    pump_maintenance_savings: float = 2000.0
    water_savings_share: float = 2.0 / 3.0
    """Share of total benefit reported as water savings; the rest is energy."""


@dataclass(frozen=True)
class AnnualCostRates:
    """Annualized cost of capital, each a fraction of capital cost."""
    interest: float = 0.10
    maintenance_repair: float = 0.025
    depreciation: float = 0.05
    miscellaneous: float = 0.01


@dataclass(frozen=True)
class CostRates:
    """Complete unit rate schedule for costing and economic analysis."""
    tank: TankRates = field(default_factory=TankRates)
    piping: PipingRates = field(default_factory=PipingRates)
    filter: FilterRates = field(default_factory=FilterRates)
    recharge: RechargeRates = field(default_factory=RechargeRates)
    civil: CivilRates = field(default_factory=CivilRates)
    maintenance: MaintenanceRates = field(default_factory=MaintenanceRates)
    benefit: BenefitRates = field(default_factory=BenefitRates)
    annual_cost: AnnualCostRates = field(default_factory=AnnualCostRates)
    labor_fraction: float = 0.12
    """Labor is this fraction of the material subtotal."""
    regional_factors: Mapping[str, float] = field(
        default_factory=lambda: MappingProxyType({}), hash=False
    )
    """Multiplier on material costs keyed by region name."""

    def __post_init__(self):
        _freeze_mapping(self, "regional_factors")

    def regional_factor(self, region: str = None) -> float:
        if not region:
            return 1.0
        return self.regional_factors.get(region, 1.0)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if is_dataclass(value):
                data[f.name] = asdict(value)
            elif isinstance(value, Mapping):
                data[f.name] = dict(value)
            else:
                data[f.name] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CostRates":
        """
        Build a schedule from a (possibly partial) dict; missing keys keep defaults.

        Every rate is converted to float. Unknown keys and non-numeric values
        raise InvalidInputError naming the dotted path, e.g. "tank.masonry_per_l".
        """
        base = cls()
        known = {f.name for f in fields(cls)}
        for key in data:
            if key not in known:
                raise InvalidInputError(key, data[key], "unknown rate group or setting")

        overrides: Dict[str, Any] = {}
        for name in known & set(data):
            current = getattr(base, name)
            value = data[name]
            if is_dataclass(current) or name == "regional_factors":
                if not isinstance(value, Mapping):
                    raise InvalidInputError(name, value, "must be a mapping")
            if is_dataclass(current):
                group_fields = {f.name for f in fields(current)}
                changes = {}
                for key, item in value.items():
                    path = f"{name}.{key}"
                    if key not in group_fields:
                        raise InvalidInputError(path, item, "unknown rate")
                    changes[key] = _to_float(path, item)
                overrides[name] = replace(current, **changes)
            elif name == "regional_factors":
                overrides[name] = {
                    str(k): _to_float(f"{name}.{k}", v) for k, v in value.items()
                }
            else:
                overrides[name] = _to_float(name, value)
        return replace(base, **overrides)


DEFAULT_COST_RATES = CostRates()


def load_cost_rates(path: Union[str, Path]) -> CostRates:
    """Load a JSON rate schedule, merging it onto the defaults."""
    path = Path(path)
    with open(path) as f:
        data = json.load(f)
    rates = CostRates.from_dict(data)
    log.info(f"Loaded cost rates from {path}")
    return rates


def save_cost_rates(rates: CostRates, path: Union[str, Path]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(rates.to_dict(), f, indent=2)
    log.info(f"Saved cost rates to {path}")
