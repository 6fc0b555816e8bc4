"""
CLI interface for SCP Guard.

Provides command-line access to policy generation from scanner reports.
"""

import logging
import sys
from typing import Optional

import typer
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from scp_guard.config.loader import PipelineConfig, load_pipeline_config
from scp_guard.core.classifier import predicate_for
from scp_guard.core.errors import SCPGuardError
from scp_guard.core.pipeline import PipelineResult, ReportSelection, generate_policy
from scp_guard.core.policy import PolicyMode
from scp_guard.core.report import extract_service_name, parse_report
from scp_guard.core.tally import build_tally
from scp_guard.demo.sample_report import write_sample_report
from scp_guard.storage.repository import FilePolicyStore, FileReportSource

app = typer.Typer()
console = Console()
err_console = Console(stderr=True)
logger = logging.getLogger(__name__)

EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr
    )


def _resolve_config(config_path: Optional[str], **overrides) -> PipelineConfig:
    """Load the config file if given and apply CLI overrides on top."""
    base = load_pipeline_config(config_path) if config_path else PipelineConfig()
    return base.with_overrides(**overrides)


def _fail(message: str) -> None:
    err_console.print(f"[red]Error:[/] {escape(message)}")
    sys.exit(EXIT_CODE_FAIL)


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context):
    """SCP Guard CLI."""
    if ctx.invoked_subcommand is None:
        console.print("SCP Guard - Use --help to see available commands")


@app.command()
def generate(
    scp_type: Optional[str] = typer.Option(
        None,
        "--type",
        "-t",
        help="Policy effect, either Allow or Deny [default: Allow]"
    ),
    fileloc: Optional[str] = typer.Option(
        None,
        "--fileloc",
        "-f",
        help="File location of scanner usage report [default: ./s3_usage.json]"
    ),
    threshold: Optional[int] = typer.Option(
        None,
        "--threshold",
        "-n",
        help="Decision threshold for API call counts [default: 10]"
    ),
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Where to write the policy document [default: testSCP.json]"
    ),
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML file with pipeline settings"
    ),
    single_report: bool = typer.Option(
        False,
        "--single-report",
        help="Fail if the scanner file holds more than one report"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log progress to stderr"
    )
):
    """
    Generate a service control policy from a scanner usage report.

    Allow policies list every action called at least THRESHOLD times.
    Deny policies list every action called fewer than THRESHOLD times.
    """
    _configure_logging(verbose)
    try:
        settings = _resolve_config(
            config,
            mode=scp_type,
            report_path=fileloc,
            threshold=threshold,
            output_path=output,
            report_selection=ReportSelection.SINGLE if single_report else None
        )
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        _fail(str(e))

    logger.info(
        "Generating %s policy from %s with threshold %d",
        settings.mode, settings.report_path, settings.threshold
    )

    try:
        result = generate_policy(
            mode=settings.mode,
            threshold=settings.threshold,
            source=FileReportSource(settings.report_path),
            sink=FilePolicyStore(settings.output_path),
            selection=settings.report_selection
        )
    except SCPGuardError as e:
        logger.debug("Policy generation failed", exc_info=True)
        _fail(str(e))

    if result.ignored_reports:
        logger.warning(
            "Scanner file holds %d reports; only the first was processed",
            result.report_count
        )

    _display_pipeline_result(result, settings.output_path)
    sys.exit(EXIT_CODE_PASS)


@app.command()
def inspect(
    fileloc: str = typer.Option(
        "./s3_usage.json",
        "--fileloc",
        "-f",
        help="File location of scanner usage report"
    ),
    scp_type: str = typer.Option(
        "Allow",
        "--type",
        "-t",
        help="Policy effect, either Allow or Deny"
    ),
    threshold: int = typer.Option(
        10,
        "--threshold",
        "-n",
        help="Decision threshold for API call counts"
    )
):
    """Show the usage entries of a scanner report and which ones qualify."""
    try:
        mode = PolicyMode.parse(scp_type)
        report = parse_report(FileReportSource(fileloc).load())[0]
        predicate = predicate_for(mode)
        tally = build_tally(threshold, report, predicate)
    except SCPGuardError as e:
        _fail(str(e))

    service = extract_service_name(report.event_source)

    table = Table(title=f"{service} usage ({report.account.identifier or 'unknown account'})")
    table.add_column("Action")
    table.add_column("Count", justify="right")
    table.add_column(f"{mode.value} at {threshold}", justify="center")

    for entry in report.entries:
        qualifies = predicate(entry.count, threshold)
        table.add_row(
            f"{service}:{entry.event_name}",
            f"{entry.count:,}",
            "[green]yes[/]" if qualifies else "[dim]no[/]"
        )

    console.print(table)
    console.print(f"{len(tally)} distinct actions qualify")
    sys.exit(EXIT_CODE_PASS)


@app.command()
def sample(
    path: str = typer.Argument("./s3_usage.json", help="Where to write the sample report")
):
    """Write a sample s3 scanner report for trying out the tool."""
    try:
        target = write_sample_report(path)
    except OSError as e:
        _fail(f"cannot write sample report: {e}")
    console.print(f"[green]✓[/] Sample report written to {target}")
    sys.exit(EXIT_CODE_PASS)


def _display_pipeline_result(result: PipelineResult, output_path: str) -> None:
    """Display a short summary of the generated policy."""
    document = result.document
    console.print("\n[bold]SCP Generation Result[/bold]")
    console.print("-" * 40)
    console.print(f"Service: {result.service_name}")
    console.print(f"Effect: {document.effect.value}")
    console.print(f"Actions: {len(document.actions)} of {len(result.report.entries)} reported")
    console.print(f"Written to: {output_path}")


if __name__ == "__main__":
    app()
