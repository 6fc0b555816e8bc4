"""
Policy generation pipeline.

Sequences report loading, parsing, threshold classification, policy
synthesis and persistence for a single run.

Pipeline Order:
1. Mode validation - Fails before any I/O is attempted
2. Report loading - Raw bytes from the injected report source
3. Parsing and report selection
4. Service name extraction
5. Threshold classification
6. Policy synthesis
7. Persistence - Document handed to the injected policy sink

The first failure aborts the run and is raised unchanged. Nothing is
retried and nothing is logged here; reporting is left to the caller.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from .classifier import predicate_for
from .errors import ParseError
from .policy import PolicyDocument, PolicyMode, synthesize
from .report import extract_service_name, parse_report
from .tally import ActionTally, build_tally
from scp_guard.storage.models import UsageReport


class ReportSelection(Enum):
    """How to treat a scanner file holding more than one report."""
    FIRST = "first"    # Use the first report, ignore the rest
    SINGLE = "single"  # Reject files with more than one report


class ReportSource(Protocol):
    """Supplies raw scanner report bytes."""
    def load(self) -> bytes:
        ...


class PolicySink(Protocol):
    """Stores a finished policy document."""
    def save(self, document: PolicyDocument) -> None:
        ...


@dataclass(frozen=True)
class PipelineResult:
    """Outcome of a successful pipeline run."""
    report_count: int
    report: UsageReport
    service_name: str
    tally: ActionTally
    document: PolicyDocument

    @property
    def ignored_reports(self) -> int:
        """Number of reports in the file that were not processed."""
        return self.report_count - 1


def generate_policy(
    mode: str,
    threshold: int,
    source: ReportSource,
    sink: PolicySink,
    selection: ReportSelection = ReportSelection.FIRST
) -> PipelineResult:
    """
    Derive a policy document from a scanner report and store it.

    Args:
        mode: ``Allow`` or ``Deny``, case-insensitive
        threshold: Usage threshold, must be > 0
        source: Provider of the raw scanner report
        sink: Destination of the finished document
        selection: Handling of multi-report files

    Returns:
        PipelineResult describing the processed report and stored document

    Raises:
        InvalidModeError: If mode is not Allow or Deny
        InputUnavailableError: If the source cannot be read
        ParseError: If the report is malformed, or holds several reports
            under ReportSelection.SINGLE
        ValidationError: If threshold is not positive
        PersistenceError: If the sink cannot store the document
    """
    policy_mode = PolicyMode.parse(mode)

    raw = source.load()

    reports = parse_report(raw)
    if selection == ReportSelection.SINGLE and len(reports) > 1:
        raise ParseError(f"expected exactly one report, found {len(reports)}")
    report = reports[0]

    service_name = extract_service_name(report.event_source)

    tally = build_tally(threshold, report, predicate_for(policy_mode))

    document = synthesize(policy_mode, service_name, tally)

    sink.save(document)

    return PipelineResult(
        report_count=len(reports),
        report=report,
        service_name=service_name,
        tally=tally,
        document=document
    )
