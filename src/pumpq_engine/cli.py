"""Command-line interface for PumpQ engine."""

import json
import logging
from pathlib import Path

import typer

from pumpq_engine import __version__

app = typer.Typer(
    help="PumpQ Pumping Station Optimization Engine",
    no_args_is_help=True,
)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")):
    """Configure logging for all commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def version():
    """Show PumpQ version."""
    typer.echo(f"PumpQ Engine v{__version__}")


@app.command()
def validate(bundle_path: str):
    """Validate a run bundle.

    Args:
        bundle_path: Path to bundle directory
    """
    from pumpq_engine.io.bundle import load_bundle, validate_bundle

    try:
        validate_bundle(bundle_path)
        load_bundle(bundle_path)
        typer.secho(f"✓ Bundle at {bundle_path} is valid", fg=typer.colors.GREEN)
    except Exception as e:
        typer.secho(f"✗ Bundle validation failed: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)


@app.command()
def plan(bundle_path: str):
    """Forecast demand, schedule pumps and screen anomalies for a bundle.

    Args:
        bundle_path: Path to bundle directory
    """
    from pumpq_engine.runners.daily_plan import run_daily_plan

    try:
        run_daily_plan(bundle_path)
        typer.secho("\n✓ Daily plan completed successfully", fg=typer.colors.GREEN)
    except Exception as e:
        typer.secho(f"\n✗ Daily plan failed: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)


@app.command()
def describe(
    engine: str = typer.Argument("all", help="optimizer, detector, forecaster or all"),
):
    """Show engine configuration defaults."""
    from pumpq_engine.detect.detector import describe_detector, feature_importance
    from pumpq_engine.forecast.predictor import describe_forecaster
    from pumpq_engine.model.solve import describe_optimizer

    describers = {
        "optimizer": describe_optimizer,
        "detector": describe_detector,
        "forecaster": describe_forecaster,
    }
    if engine != "all" and engine not in describers:
        typer.secho(f"✗ Unknown engine: {engine}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    selected = describers if engine == "all" else {engine: describers[engine]}
    payload = {name: describer().model_dump(mode="json") for name, describer in selected.items()}
    if "detector" in payload:
        payload["detector"]["feature_importance"] = feature_importance()

    typer.echo(json.dumps(payload, indent=2))


@app.command()
def report(bundle_path: str):
    """Generate report from daily plan results.

    Args:
        bundle_path: Path to bundle directory
    """
    bundle_path_obj = Path(bundle_path)

    metrics_file = bundle_path_obj / "metrics.json"
    schedule_file = bundle_path_obj / "schedule.json"
    if not metrics_file.exists() or not schedule_file.exists():
        typer.secho(
            "✗ No results found in bundle. Run plan first.",
            fg=typer.colors.RED,
            err=True,
        )
        raise typer.Exit(1)

    with open(metrics_file) as f:
        metrics = json.load(f)
    with open(schedule_file) as f:
        schedule = json.load(f)

    typer.echo("\n" + "=" * 60)
    typer.echo("DAILY PLAN RESULTS")
    typer.echo("=" * 60)

    typer.echo("\nCost Analysis:")
    typer.echo(f"  Uniform cost:     {metrics['uniform_cost']:.0f}")
    typer.echo(f"  Optimized cost:   {metrics['optimal_cost']:.0f}")
    typer.echo(f"  Savings:          {metrics['savings']:.0f} ({metrics['savings_pct']:.1f}%)")

    typer.echo("\nSchedule:")
    typer.echo(f"  Active pumps:     {' '.join(str(n) for n in schedule['planning'])}")
    typer.echo(f"  Pump-hours:       {metrics['pump_hours']}")
    typer.echo(f"  Power factor:     {metrics['power_factor']:.2f} (min {metrics['min_power_factor']:.2f})")

    typer.echo("\nReservoir:")
    typer.echo(f"  Start / end:      {metrics['reservoir_start_pct']:.1f}% / {metrics['reservoir_end_pct']:.1f}%")
    typer.echo(f"  Min / max:        {metrics['reservoir_min_pct']:.1f}% / {metrics['reservoir_max_pct']:.1f}%")

    if "forecast_daily_total_m3" in metrics:
        typer.echo("\nDemand Forecast:")
        typer.echo(f"  Daily total:      {metrics['forecast_daily_total_m3']} m³")
        typer.echo(f"  Confidence:       {metrics['forecast_confidence']:.2f}")
        typer.echo(f"  Peak hours:       {metrics['forecast_peak_hours']}")

    if "anomaly_count" in metrics:
        typer.echo("\nAnomalies:")
        typer.echo(f"  Flagged:          {metrics['anomaly_count']} / {metrics['readings_analyzed']}")
        if metrics["anomaly_rate_exceeds_contamination"]:
            typer.secho("  Anomaly rate above expected contamination", fg=typer.colors.YELLOW)

    typer.echo("\n" + "=" * 60 + "\n")

    typer.secho("✓ Report generated", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
