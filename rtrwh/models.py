"""
Core data models for the RTRWH feasibility engine.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional, Tuple, Union, Dict, Any


class RoofType(str, Enum):
    """Roofing material, which fixes the runoff coefficient."""
    GI_SHEET = "GI Sheet"
    ASBESTOS = "Asbestos"
    TILES = "Tiles"
    CONCRETE = "Concrete"


class AquiferType(str, Enum):
    """Hydrogeological class of the underlying aquifer."""
    CONSOLIDATED = "Consolidated"
    SEMI_CONSOLIDATED = "Semi-consolidated"
    UNCONSOLIDATED = "Unconsolidated"


class FilterType(str, Enum):
    SLOW_SAND = "Slow Sand"
    RAPID_SAND = "Rapid Sand"


class RechargeStructureType(str, Enum):
    SHALLOW_PIT = "Recharge Pit (Shallow)"
    PIT = "Recharge Pit"
    SHAFT = "Recharge Shaft"

    @property
    def is_pit(self) -> bool:
        return self in (RechargeStructureType.SHALLOW_PIT, RechargeStructureType.PIT)


def _enum_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _coerce(enum_cls, value: Any) -> Any:
    """Convert a known string value to its enum member; leave anything else alone."""
    try:
        return enum_cls(value)
    except ValueError:
        return value


@dataclass(frozen=True)
class ProjectInput:
    """
    Site and household parameters for one assessment.

    Supplied by the caller after any geocoding/rainfall/elevation enrichment.
    Optional depths are in metres below ground level.
    """
    roof_area: float                 # m²
    roof_type: Union[RoofType, str]
    household_size: int              # persons
    water_scarcity_days: float       # days per year, 0-365
    annual_rainfall: float           # mm/year
    rainfall_intensity: float        # mm/hr, design storm
    aquifer_type: Union[AquiferType, str]
    depth_water_premonsoon: Optional[float] = None
    depth_water_postmonsoon: Optional[float] = None
    soil_type: Optional[str] = None
    infiltration_rate: Optional[float] = None
    available_space: Optional[float] = None  # m² of open land

    @property
    def depth_reduction(self) -> Optional[float]:
        """Seasonal rise of the water table, when both readings are known."""
        if self.depth_water_premonsoon and self.depth_water_postmonsoon:
            return self.depth_water_premonsoon - self.depth_water_postmonsoon
        return None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["roof_type"] = _enum_value(self.roof_type)
        data["aquifer_type"] = _enum_value(self.aquifer_type)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProjectInput":
        data = dict(data)
        if "roof_type" in data:
            data["roof_type"] = _coerce(RoofType, data["roof_type"])
        if "aquifer_type" in data:
            data["aquifer_type"] = _coerce(AquiferType, data["aquifer_type"])
        return cls(**data)


@dataclass(frozen=True)
class DesignResult:
    """
    Complete RTRWH system design derived from a ProjectInput.

    Volumes are in litres, flows in L/s, pipe diameters in mm and structure
    dimensions in metres.
    """
    # Water balance
    water_available: float
    water_required: float
    is_feasible: bool

    # Storage
    tank_capacity: float
    tank_diameter: float
    tank_height: float

    # Collection
    peak_flow: float
    gutter_diameter: float
    downpipe_diameter: float
    first_flush_volume: float
    first_flush_pipe_length: float

    # Treatment
    filter_type: FilterType
    filter_area: float
    filter_length: float
    filter_width: float

    # Recharge
    recharge_structure_type: RechargeStructureType
    recharge_structure_depth: float
    recharge_structure_diameter: float

    warnings: Tuple[str, ...] = field(default_factory=tuple)
    recommendations: Tuple[str, ...] = field(default_factory=tuple)

    # Carried for downstream costing
    roof_area: float = 0.0
    runoff_coefficient: float = 0.0

    @property
    def storage_target(self) -> float:
        """Volume the tank was sized for, before rounding."""
        return self.water_required if self.is_feasible else self.water_available

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["filter_type"] = self.filter_type.value
        data["recharge_structure_type"] = self.recharge_structure_type.value
        data["warnings"] = list(self.warnings)
        data["recommendations"] = list(self.recommendations)
        return data
