"""
Tests for the policy generation pipeline.

Uses in-memory report sources and policy sinks in place of files.
"""
import json
from unittest.mock import Mock

import pytest

from scp_guard.core.errors import (
    InputUnavailableError,
    InvalidModeError,
    ParseError,
    PersistenceError,
    ValidationError
)
from scp_guard.core.pipeline import ReportSelection, generate_policy
from scp_guard.core.policy import PolicyMode
from scp_guard.demo.sample_report import SAMPLE_REPORT, sample_report_bytes


class StubReportSource:
    """Returns fixed bytes instead of reading a file."""

    def __init__(self, data: bytes):
        self.data = data
        self.calls = 0

    def load(self) -> bytes:
        self.calls += 1
        return self.data


class FailingReportSource:
    """Fails the way an unreadable report file does."""

    def load(self) -> bytes:
        raise InputUnavailableError("missing.json")


class RecordingSink:
    """Keeps saved documents in memory."""

    def __init__(self):
        self.saved = []

    def save(self, document) -> None:
        self.saved.append(document)


@pytest.fixture
def source():
    return StubReportSource(sample_report_bytes())


@pytest.fixture
def sink():
    return RecordingSink()


class TestGeneratePolicy:
    """Test successful pipeline runs."""

    def test_allow_policy_from_sample(self, source, sink):
        result = generate_policy("Allow", 10, source, sink)

        assert len(result.tally) == 8
        assert result.service_name == "s3"
        assert result.document.effect is PolicyMode.ALLOW
        assert len(result.document.actions) == 8
        assert "s3:CreateMultipartUpload" not in result.document.actions
        assert "s3:GetBucketLifecycle" not in result.document.actions
        assert sink.saved == [result.document]

    def test_deny_policy_from_sample(self, source, sink):
        result = generate_policy("Deny", 10, source, sink)

        assert result.document.effect is PolicyMode.DENY
        assert set(result.document.actions) == {
            "s3:CreateMultipartUpload",
            "s3:GetBucketLifecycle",
        }

    @pytest.mark.parametrize("mode", ["ALLOW", "allow", "deny", "DeNy"])
    def test_mode_is_case_insensitive(self, source, sink, mode):
        result = generate_policy(mode, 10, source, sink)
        assert result.document.effect.value == mode.capitalize()

    def test_high_threshold_yields_empty_policy(self, source, sink):
        result = generate_policy("Allow", 3000, source, sink)

        assert len(result.tally) == 0
        assert result.document.actions == ()
        assert result.document.version == "2012-10-17"
        assert result.document.resource == "*"
        assert len(sink.saved) == 1

    def test_first_report_used_by_default(self, sink):
        second = {"results": {"event_source": "ec2.amazonaws.com", "service_usage": []}}
        source = StubReportSource(json.dumps(SAMPLE_REPORT + [second]).encode())

        result = generate_policy("Allow", 10, source, sink)

        assert result.service_name == "s3"
        assert result.report_count == 2
        assert result.ignored_reports == 1

    def test_single_report_selection_accepts_one_report(self, source, sink):
        result = generate_policy("Allow", 10, source, sink, selection=ReportSelection.SINGLE)
        assert result.ignored_reports == 0


class TestGeneratePolicyErrors:
    """Test that each failure aborts the run and nothing is saved."""

    def test_invalid_mode_fails_before_io(self, source, sink):
        with pytest.raises(InvalidModeError):
            generate_policy("Allowme", 10, source, sink)

        assert source.calls == 0
        assert sink.saved == []

    def test_unavailable_input_propagates(self, sink):
        with pytest.raises(InputUnavailableError):
            generate_policy("Allow", 10, FailingReportSource(), sink)
        assert sink.saved == []

    def test_malformed_report_propagates(self, sink):
        with pytest.raises(ParseError):
            generate_policy("Allow", 10, StubReportSource(b"[{"), sink)
        assert sink.saved == []

    def test_empty_report_set_rejected(self, sink):
        with pytest.raises(ParseError, match="no reports"):
            generate_policy("Allow", 10, StubReportSource(b"[]"), sink)

    def test_multiple_reports_rejected_in_single_mode(self, sink):
        source = StubReportSource(json.dumps(SAMPLE_REPORT * 2).encode())

        with pytest.raises(ParseError, match="expected exactly one report, found 2"):
            generate_policy("Allow", 10, source, sink, selection=ReportSelection.SINGLE)
        assert sink.saved == []

    @pytest.mark.parametrize("threshold", [0, -1])
    def test_invalid_threshold_rejected(self, source, sink, threshold):
        with pytest.raises(ValidationError):
            generate_policy("Deny", threshold, source, sink)
        assert sink.saved == []

    def test_persistence_error_propagates_unchanged(self, source):
        error = PersistenceError("disk full")
        sink = Mock()
        sink.save.side_effect = error

        with pytest.raises(PersistenceError) as excinfo:
            generate_policy("Allow", 10, source, sink)

        assert excinfo.value is error
        sink.save.assert_called_once()
