#!/usr/bin/env python3
"""
End-to-end tests for the Lambda entry point.

Run with: pytest tests/test_event_handler.py -v
"""
import os
import sys
import json
import logging
from unittest.mock import MagicMock

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

os.environ.setdefault("AWS_REGION", "eu-west-1")


class Recorder:
    """Downstream action that remembers every call."""

    def __init__(self, fail_on: int = None):
        self.calls = []
        self.fail_on = fail_on

    def __call__(self, source, content):
        if self.fail_on is not None and len(self.calls) + 1 == self.fail_on:
            raise RuntimeError("downstream unavailable")
        self.calls.append((source, content))


def lambda_context(remaining_ms: int = 30000):
    context = MagicMock()
    context.aws_request_id = "req-123"
    context.get_remaining_time_in_millis.return_value = remaining_ms
    return context


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("FORWARD_QUEUE_URL", raising=False)
    monkeypatch.delenv("EMPTY_BATCH_POLICY", raising=False)
    monkeypatch.delenv("DEADLINE_GUARD_MS", raising=False)


# =============================================================================
# TEST: Concrete scenarios
# =============================================================================

class TestScenarios:
    """Known payloads and their output strings."""

    def test_single_sqs_message(self):
        from src.app.event_handler import event_handler

        assert event_handler({"Records": [{"body": "hi"}]}, lambda_context()) == "Processed 1 messages"

    def test_two_sns_messages(self):
        from src.app.event_handler import event_handler

        event = {"Records": [{"Sns": {"Message": "x"}}, {"Sns": {"Message": "y"}}]}

        assert event_handler(event, lambda_context()) == "Processed 2 messages"

    def test_eventbridge_event(self):
        from src.app.event_handler import event_handler

        event = {"detail-type": "foo", "detail": {}}

        assert event_handler(event, lambda_context()) == "Processed 1 messages"

    def test_raw_json_bytes(self):
        from src.app.event_handler import event_handler

        assert event_handler(b'{"Records":[{"body":"hi"},{"body":"yo"}]}', lambda_context()) == "Processed 2 messages"

    @pytest.mark.parametrize("event", [[1, 2], "x", 3, None, [], '[{"body":"hi"}]', '{"Records":[{"body":"a"},{"body":"b"}]}'])
    def test_non_object_values(self, event):
        """Well-formed values that are not objects count as one generic event."""
        from src.app.event_handler import event_handler

        assert event_handler(event, None) == "Processed 1 messages"

    def test_without_context(self):
        from src.app.event_handler import event_handler

        assert event_handler({"Records": [{"body": "hi"}]}, None) == "Processed 1 messages"


# =============================================================================
# TEST: Counting properties
# =============================================================================

class TestCounts:
    """processed_count for each shape."""

    @pytest.mark.parametrize("k", [1, 2, 5, 25])
    def test_queue_batch_counts_records(self, k):
        from src.app.event_handler import handle
        from src.runtime.deps import create_deps

        event = {"Records": [{"body": f"m{i}"} for i in range(k)]}

        assert handle(event, create_deps(downstream=Recorder())).processed_count == k

    @pytest.mark.parametrize("k", [1, 3, 10])
    def test_pubsub_batch_counts_records(self, k):
        from src.app.event_handler import handle
        from src.runtime.deps import create_deps

        event = {"Records": [{"Sns": {"Message": f"m{i}"}} for i in range(k)]}

        assert handle(event, create_deps(downstream=Recorder())).processed_count == k

    @pytest.mark.parametrize("event", [
        {"Records": []},
        {"detail-type": "foo", "detail": {}},
        {"anything": ["else"]},
        {},
    ])
    def test_everything_else_counts_one(self, event):
        from src.app.event_handler import handle
        from src.runtime.deps import create_deps
        from src.runtime.envelope import EnvelopeKind

        result = handle(event, create_deps(downstream=Recorder()))

        assert result.processed_count == 1
        assert result.kind == EnvelopeKind.GENERIC_EVENT

    def test_empty_batch_noop_policy(self, monkeypatch):
        """EMPTY_BATCH_POLICY=noop reports zero for an empty Records list."""
        from src.app.event_handler import event_handler
        from src.runtime.deps import create_deps

        monkeypatch.setenv("EMPTY_BATCH_POLICY", "noop")
        recorder = Recorder()

        output = event_handler({"Records": []}, lambda_context(), create_deps(downstream=recorder))

        assert output == "Processed 0 messages"
        assert recorder.calls == []

    def test_queue_priority_over_generic(self):
        from src.app.event_handler import handle
        from src.runtime.deps import create_deps
        from src.runtime.envelope import EnvelopeKind

        event = {"source": "custom", "detail-type": "foo", "detail": {}, "Records": [{"body": "hi"}]}
        recorder = Recorder()

        result = handle(event, create_deps(downstream=recorder))

        assert result.kind == EnvelopeKind.QUEUE_BATCH
        assert recorder.calls == [("SQS", "hi")]

    def test_idempotent(self):
        """Same payload twice gives the same count."""
        from src.app.event_handler import handle
        from src.runtime.deps import create_deps

        deps = create_deps(downstream=Recorder())
        event = {"Records": [{"body": "a"}, {"body": "b"}]}

        assert handle(event, deps).processed_count == handle(event, deps).processed_count == 2


# =============================================================================
# TEST: Ordering and failures
# =============================================================================

class TestFailures:
    """Error propagation."""

    def test_order_preserved(self):
        from src.app.event_handler import handle
        from src.runtime.deps import create_deps

        recorder = Recorder()
        handle({"Records": [{"body": "a"}, {"body": "b"}, {"body": "c"}]}, create_deps(downstream=recorder))

        assert [content for _, content in recorder.calls] == ["a", "b", "c"]

    def test_malformed_input(self):
        """Non-JSON input fails before anything is processed."""
        from src.app.event_handler import event_handler
        from src.runtime.deps import create_deps
        from src.runtime.errors import DecodeError

        recorder = Recorder()

        with pytest.raises(DecodeError):
            event_handler(b'{"Records": [', lambda_context(), create_deps(downstream=recorder))

        assert recorder.calls == []

    @pytest.mark.skipif(not hasattr(sys, "set_int_max_str_digits"), reason="no integer digit limit")
    def test_oversized_integer_fails_decode(self):
        from src.app.event_handler import handle
        from src.runtime.deps import create_deps
        from src.runtime.errors import DecodeError

        recorder = Recorder()

        with pytest.raises(DecodeError):
            handle(('{"a": 1' + "0" * 5000 + "}").encode("utf-8"), create_deps(downstream=recorder))

        assert recorder.calls == []

    def test_failure_on_second_of_three(self):
        from src.app.event_handler import event_handler
        from src.runtime.deps import create_deps
        from src.runtime.errors import ProcessingError

        recorder = Recorder(fail_on=2)
        event = {"Records": [{"body": "a"}, {"body": "b"}, {"body": "c"}]}

        with pytest.raises(ProcessingError):
            event_handler(event, lambda_context(), create_deps(downstream=recorder))

        assert recorder.calls == [("SQS", "a")]

    def test_failure_is_logged(self, caplog):
        from src.app.event_handler import event_handler
        from src.runtime.deps import create_deps
        from src.runtime.errors import ProcessingError

        caplog.set_level(logging.INFO)

        with pytest.raises(ProcessingError):
            event_handler({"Records": [{"body": "a"}]}, lambda_context(), create_deps(downstream=Recorder(fail_on=1)))

        assert any(r.levelno == logging.ERROR and "Invocation failed" in r.getMessage() for r in caplog.records)

    def test_deadline_exhausted(self):
        from src.app.event_handler import event_handler
        from src.runtime.deps import create_deps
        from src.runtime.errors import DeadlineExceededError

        recorder = Recorder()

        with pytest.raises(DeadlineExceededError):
            event_handler({"Records": [{"body": "a"}]}, lambda_context(remaining_ms=0), create_deps(downstream=recorder))

        assert recorder.calls == []


# =============================================================================
# TEST: Lambda module
# =============================================================================

class TestLambdaModule:
    """Tests for app.lambda_handler."""

    def test_lambda_handler(self, caplog):
        import app

        caplog.set_level(logging.INFO)
        event = {"Records": [{"Sns": {"Message": "x"}}]}

        assert app.lambda_handler(event, lambda_context()) == "Processed 1 messages"
        assert "Received SNS message: x" in caplog.text
        assert "Hello World from SNS" in caplog.text

    def test_deps_shared_across_invocations(self):
        import app

        deps = app.DEPS
        app.lambda_handler({"detail-type": "foo", "detail": {}}, lambda_context())
        app.lambda_handler({"detail-type": "foo", "detail": {}}, lambda_context())

        assert app.DEPS is deps


# =============================================================================
# TEST: CLI
# =============================================================================

class TestCli:
    """Tests for tools/cli.py."""

    @pytest.mark.parametrize("sample,expected", [
        ("sqs", "Processed 2 messages"),
        ("sns", "Processed 1 messages"),
        ("eventbridge", "Processed 1 messages"),
    ])
    def test_samples(self, sample, expected, capsys):
        from tools.cli import main

        assert main(["--sample", sample]) == 0
        assert capsys.readouterr().out.strip() == expected

    def test_json_argument(self, capsys):
        from tools.cli import main

        assert main(["--json", '{"Records":[{"Sns":{"Message":"x"}},{"Sns":{"Message":"y"}}]}']) == 0
        assert capsys.readouterr().out.strip() == "Processed 2 messages"

    def test_file_argument(self, tmp_path, capsys):
        from tools.cli import main

        path = tmp_path / "event.json"
        path.write_text(json.dumps({"Records": [{"body": "hi"}]}))

        assert main(["--file", str(path)]) == 0
        assert capsys.readouterr().out.strip() == "Processed 1 messages"

    def test_malformed_json_exits_nonzero(self, capsys):
        from tools.cli import main

        assert main(["--json", "{nope"]) == 1
        assert "ERROR" in capsys.readouterr().err

    def test_deeply_nested_json_exits_nonzero(self, capsys):
        from tools.cli import main

        depth = 200000
        assert main(["--json", "[" * depth + "]" * depth]) == 1
        assert "ERROR" in capsys.readouterr().err

    @pytest.mark.skipif(not hasattr(sys, "set_int_max_str_digits"), reason="no integer digit limit")
    def test_oversized_integer_exits_nonzero(self, capsys):
        from tools.cli import main

        assert main(["--json", '{"a": 1' + "0" * 5000 + "}"]) == 1
        assert "ERROR" in capsys.readouterr().err
