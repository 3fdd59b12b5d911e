"""Command-line interface for the HYROX program generator."""

import json
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .analysis.athlete_profiler import AthleteProfileInput, analyze_profile
from .analysis.benchmarks import format_pace, format_time, parse_time
from .analysis.periodization import ProgramParamsError
from .analysis.program_generator import ProgramGenerator, ProgramParams
from .analysis.templates import TemplateError
from .analysis.vdot import RaceDistance, calculate_vdot, training_paces
from .api.pace_client import ElitePaceClient
from .config import config

console = Console()


def _load_json(path: str) -> dict:
    try:
        return json.loads(Path(path).read_text())
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"{path} is not valid JSON: {e}")


@click.group()
def cli():
    """HYROX Training Program Generator."""
    logging.basicConfig(level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO))


@cli.command()
@click.argument("athlete_file", type=click.Path(exists=True, dir_okay=False))
def profile(athlete_file):
    """Classify an athlete from a JSON benchmark file."""
    console.print(Panel.fit("🏃 HYROX Athlete Profile", style="bold blue"))

    try:
        athlete = AthleteProfileInput.from_dict(_load_json(athlete_file))
    except (KeyError, ValueError) as e:
        raise click.BadParameter(f"Invalid athlete data: {e}")

    result = analyze_profile(athlete)

    table = Table(title="Classification")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Athlete type", result.athlete_type.value)
    table.add_row("Runner type", result.runner_type.value)
    table.add_row("Station type", result.station_type.value)
    table.add_row("Running score", str(result.running_score))
    table.add_row("Station score", str(result.station_score))
    if result.vdot is not None:
        table.add_row("VDOT", f"{result.vdot:.1f}")
    if result.pace_degradation is not None:
        table.add_row("Pace degradation", f"{result.pace_degradation:.1f}% ({result.pace_degradation_level.value})")
    table.add_row("Weak stations", ", ".join(s.label for s in result.weak_stations) or "-")
    table.add_row("Strong stations", ", ".join(s.label for s in result.strong_stations) or "-")
    table.add_row("Recommended weekly km", f"{result.volume.recommended_weekly_km:g}")
    table.add_row("Volume scale factor", f"{result.volume.scale_factor:.2f}")
    if result.goal.estimated_current_time is not None:
        table.add_row("Estimated race time", format_time(result.goal.estimated_current_time))
    table.add_row("Goal", result.goal.assessment)
    console.print(table)

    console.print(f"\n[bold]{result.description}[/bold]")
    for focus in result.training_focus:
        console.print(f"  • {focus}")


@cli.command()
@click.option("--distance", required=True, help="Race distance: 5K, 10K, HALF or MARATHON")
@click.option("--time", "race_time", required=True, help="Race time as MM:SS or H:MM:SS")
def paces(distance, race_time):
    """Show VDOT and training paces for a race result."""
    try:
        race_distance = RaceDistance.parse(distance)
    except ValueError:
        raise click.BadParameter(f"Unknown distance: {distance}")

    seconds = parse_time(race_time)
    vdot = calculate_vdot(race_distance.meters, seconds) if seconds else None
    if vdot is None:
        raise click.BadParameter(f"Invalid race time: {race_time}")

    console.print(Panel.fit(f"⏱️  {race_distance.value} in {format_time(seconds)} - VDOT {vdot:.1f}",
                            style="bold blue"))
    model = training_paces(vdot)

    table = Table(title="Training Paces")
    table.add_column("Zone", style="cyan")
    table.add_column("Pace", style="green")
    table.add_row("Easy", f"{format_pace(model.easy_max)} - {format_pace(model.easy_min)}")
    table.add_row("Marathon", format_pace(model.marathon))
    table.add_row("Threshold", format_pace(model.threshold))
    table.add_row("Interval", format_pace(model.interval))
    table.add_row("Repetition", format_pace(model.repetition))
    console.print(table)


@cli.command()
@click.argument("params_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--athlete", "athlete_file", type=click.Path(exists=True, dir_okay=False),
              help="Athlete benchmark JSON for a personalized program")
@click.option("--output", type=click.Path(dir_okay=False), help="Write the program as JSON")
def generate(params_file, athlete_file, output):
    """Generate a periodized HYROX program."""
    console.print(Panel.fit("📅 HYROX Program Generator", style="bold blue"))

    athlete = None
    try:
        params = ProgramParams.from_dict(_load_json(params_file))
        if athlete_file:
            athlete = AthleteProfileInput.from_dict(_load_json(athlete_file))
    except ProgramParamsError as e:
        raise click.UsageError(str(e))
    except (KeyError, ValueError) as e:
        raise click.BadParameter(f"Invalid athlete data: {e}")

    pace_client = ElitePaceClient() if config.pace_api_enabled() else None
    generator = ProgramGenerator(pace_client=pace_client)

    try:
        program = generator.generate(params, athlete)
    except ProgramParamsError as e:
        raise click.UsageError(str(e))
    except TemplateError as e:
        console.print(f"[red]❌ Internal template error: {e}[/red]")
        raise SystemExit(1)

    table = Table(title=f"{program.name} ({program.start_date} - {program.end_date})")
    table.add_column("Week", justify="right", style="cyan")
    table.add_column("Phase", style="magenta")
    table.add_column("Run km", justify="right")
    table.add_column("Run min", justify="right")
    table.add_column("Sessions", justify="right")
    table.add_column("Focus")
    for week in program.weeks:
        sessions = sum(len(day.workouts) for day in week.days)
        table.add_row(str(week.week_number), week.phase.value, f"{week.volume_km:.1f}",
                      str(week.running_minutes), str(sessions), week.focus)
    console.print(table)

    console.print("\n[bold]Notes[/bold]")
    for line in program.notes.splitlines():
        console.print(f"  • {line}")

    if output:
        Path(output).write_text(json.dumps(program.to_dict(), indent=2))
        console.print(f"\n[green]✅ Program written to {output}[/green]")


if __name__ == "__main__":
    cli()
