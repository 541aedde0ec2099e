import argparse
import logging
import math
import os

from rtrwh import (
    ProjectInput, RoofType, AquiferType, CostInput, DEFAULT_COST_RATES,
    assess_project, load_cost_rates, recovery_timeline, get_sensitivity_analyzer,
)

# Sample household: 100 m² concrete roof, family of four
DEFAULT_ROOF_AREA = 100.0
DEFAULT_HOUSEHOLD_SIZE = 4
DEFAULT_SCARCITY_DAYS = 90
DEFAULT_RAINFALL_MM = 1000.0
DEFAULT_INTENSITY_MM_HR = 50.0


def _fmt_years(value: float) -> str:
    return "never" if math.isinf(value) else f"{value:.1f} years"


def parse_args():
    parser = argparse.ArgumentParser(description="Rooftop rainwater harvesting feasibility assessment")
    parser.add_argument("--roof-area", type=float, default=DEFAULT_ROOF_AREA, help="Roof area in m²")
    parser.add_argument("--roof-type", default=RoofType.CONCRETE.value,
                        choices=[r.value for r in RoofType])
    parser.add_argument("--household-size", type=int, default=DEFAULT_HOUSEHOLD_SIZE)
    parser.add_argument("--scarcity-days", type=float, default=DEFAULT_SCARCITY_DAYS)
    parser.add_argument("--rainfall", type=float, default=DEFAULT_RAINFALL_MM, help="Annual rainfall in mm")
    parser.add_argument("--intensity", type=float, default=DEFAULT_INTENSITY_MM_HR, help="Design rainfall intensity in mm/hr")
    parser.add_argument("--aquifer", default=AquiferType.UNCONSOLIDATED.value,
                        choices=[a.value for a in AquiferType])
    parser.add_argument("--depth-pre", type=float, help="Pre-monsoon water table depth in m")
    parser.add_argument("--depth-post", type=float, help="Post-monsoon water table depth in m")
    parser.add_argument("--infiltration-rate", type=float)
    parser.add_argument("--region", help="Region name for regional cost factors")
    parser.add_argument("--subsidy", type=float, default=0.0, help="Capital subsidy fraction (0-1)")
    parser.add_argument("--rates", default=os.getenv("RTRWH_RATES_PATH"), help="JSON cost rate schedule")
    parser.add_argument("--sensitivity", action="store_true", help="Print what-if scenarios")
    parser.add_argument("--log-level", default=os.getenv("RTRWH_LOG_LEVEL", "WARNING"))
    return parser.parse_args()


def main():
    args = parse_args()
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    rates = load_cost_rates(args.rates) if args.rates else DEFAULT_COST_RATES
    inputs = ProjectInput(
        roof_area=args.roof_area,
        roof_type=RoofType(args.roof_type),
        household_size=args.household_size,
        water_scarcity_days=args.scarcity_days,
        annual_rainfall=args.rainfall,
        rainfall_intensity=args.intensity,
        aquifer_type=AquiferType(args.aquifer),
        depth_water_premonsoon=args.depth_pre,
        depth_water_postmonsoon=args.depth_post,
        infiltration_rate=args.infiltration_rate,
    )
    cost_input = CostInput(depth_water_premonsoon=args.depth_pre, region=args.region)

    assessment = assess_project(inputs, cost_input, subsidy_fraction=args.subsidy, rates=rates)
    d = assessment.design
    e = assessment.economic_analysis

    print("=" * 60)
    print("RTRWH FEASIBILITY ASSESSMENT")
    print("=" * 60)

    print(f"\nWater available:  {d.water_available:>12,.0f} L/year")
    print(f"Water required:   {d.water_required:>12,.0f} L")
    print(f"Feasible:         {'YES' if d.is_feasible else 'NO'}")

    print("\n--- System Design ---")
    print(f"Storage tank:     {d.tank_capacity:,.0f} L (Ø {d.tank_diameter:.2f} m x {d.tank_height:.1f} m)")
    print(f"Peak flow:        {d.peak_flow:.2f} L/s")
    print(f"Gutter / downpipe: {d.gutter_diameter:.0f} mm / {d.downpipe_diameter:.0f} mm")
    print(f"First flush:      {d.first_flush_volume:.0f} L ({d.first_flush_pipe_length:.2f} m of pipe)")
    print(f"Filter:           {d.filter_type.value}, {d.filter_length:.1f} m x {d.filter_width:.1f} m")
    print(f"Recharge:         {d.recharge_structure_type.value}, "
          f"{d.recharge_structure_depth:.1f} m deep, Ø {d.recharge_structure_diameter:.2f} m")

    print("\n--- Cost Breakdown ---")
    for label, amount in assessment.cost_breakdown.line_items():
        print(f"{label:<20} {amount:>12,.0f}")

    print("\n--- Economics ---")
    print(f"Annual benefit:   {e.total_annual_benefits:,.0f}")
    print(f"Annual upkeep:    {e.annual_maintenance_cost:,.0f}")
    print(f"B/C ratio:        {e.bc_ratio:.2f}  (with subsidy {e.bc_ratio_with_subsidy:.2f})")
    print(f"Payback:          {_fmt_years(e.payback_period)}  (with subsidy {_fmt_years(e.payback_period_with_subsidy)})")
    print(f"NPV ({e.horizon_years} years):   {e.net_present_value:,.0f}")
    print(f"Verdict:          {assessment.viability.category.value}")
    print(f"                  {assessment.viability.recommendation}")

    timeline = recovery_timeline(e)
    recovered = timeline[timeline["cumulative_net"] >= 0]
    if not recovered.empty:
        print(f"Capital recovered in year {int(recovered['year'].iloc[0])}")

    if d.warnings:
        print("\nWarnings:")
        for w in d.warnings:
            print(f" ! {w}")
    print("\nRecommendations:")
    for r in d.recommendations:
        print(f" - {r}")

    if args.sensitivity:
        print("\n--- Sensitivity ---")
        analyzer = get_sensitivity_analyzer(rates)
        for result in analyzer.generate_scenario_matrix(e):
            print(f"{result.scenario.name:<36} B/C {result.adjusted_bc_ratio:5.2f}  {result.recommendation}")


if __name__ == "__main__":
    main()
