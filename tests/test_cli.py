"""
Unit Tests for the Command-Line Entry Point

Author: JobSync Project
License: MIT
"""

import signal
import pytest
from unittest.mock import Mock

import jobsync.cli as cli
from jobsync.core.cancellation import CancellationContext
from jobsync.core.synchronizer import Synchronizer


@pytest.fixture
def no_signal_handlers(monkeypatch):
    handlers = Mock()
    monkeypatch.setattr(cli, "install_signal_handlers", handlers)
    return handlers


class TestArguments:
    """Test suite for argument parsing."""

    def test_overrides_mapping(self):
        args = cli.build_parser().parse_args([
            "-s", "/data/src", "-r", "/data/dst", "-i", "1500",
            "-l", "sync.log", "-v", "2", "-f", "-c", "md5", "--max-workers", "3"
        ])

        overrides = cli.args_to_overrides(args)

        assert overrides["sync"] == {
            "source_path": "/data/src",
            "replica_path": "/data/dst",
            "interval": 1500,
            "fragile": True,
            "comparator": "md5",
            "max_workers": 3,
        }
        assert overrides["logging"] == {"log_file_path": "sync.log", "verbose": 2}

    def test_unset_flags_are_none(self):
        overrides = cli.args_to_overrides(cli.build_parser().parse_args([]))

        assert overrides["sync"]["fragile"] is None
        assert overrides["sync"]["interval"] is None
        assert overrides["logging"]["verbose"] is None

    def test_invalid_verbosity(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["-v", "5"])


class TestMain:
    """Test suite for main()."""

    def test_invalid_configuration(self, tree_dirs, capsys):
        status = cli.main(["-r", str(tree_dirs["replica"]), "-i", "10"])

        assert status == 1
        assert "ERROR: Invalid configuration, unable to proceed." in capsys.readouterr().err

    def test_missing_config_file(self, tree_dirs, capsys):
        status = cli.main(["--config", str(tree_dirs["root"] / "missing.yaml")])

        assert status == 1
        assert "Invalid configuration" in capsys.readouterr().err

    def test_fragile_missing_source_exits(self, tree_dirs, log_path, no_signal_handlers, capsys):
        status = cli.main([
            "-s", str(tree_dirs["root"] / "absent"),
            "-r", str(tree_dirs["replica"]),
            "-i", "10", "-f", "-l", str(log_path)
        ])

        assert status == 0
        assert no_signal_handlers.call_count == 1
        assert "does not exist" in capsys.readouterr().err
        assert "ERROR: Source directory" in log_path.read_text(encoding="utf-8")

    def test_runs_cycle(self, tree_dirs, log_path, no_signal_handlers, monkeypatch):
        (tree_dirs["source"] / "report.txt").write_text("quarterly")
        monkeypatch.setattr(Synchronizer, "start", lambda self: self.run_cycle())

        status = cli.main([
            "-s", str(tree_dirs["source"]),
            "-r", str(tree_dirs["replica"]),
            "-i", "10", "-v", "2", "-l", str(log_path)
        ])

        assert status == 0
        assert (tree_dirs["replica"] / "report.txt").read_text() == "quarterly"
        log_text = log_path.read_text(encoding="utf-8")
        assert "Copied file" in log_text
        assert log_text.rstrip("\n").endswith("Synchronization process completed.")

    def test_unusable_log_file(self, tree_dirs, capsys):
        # A directory cannot be opened as the log file
        status = cli.main([
            "-s", str(tree_dirs["source"]),
            "-r", str(tree_dirs["replica"]),
            "-i", "10", "-l", str(tree_dirs["root"])
        ])

        assert status == 1
        assert "Critical error occured, unable to proceed." in capsys.readouterr().err


class TestSignalHandlers:
    """Test suite for signal-driven cancellation."""

    def test_sigint_cancels(self):
        original_int = signal.getsignal(signal.SIGINT)
        original_term = signal.getsignal(signal.SIGTERM)
        logger = Mock()
        cancellation = CancellationContext()

        try:
            cli.install_signal_handlers(logger, cancellation)
            handler = signal.getsignal(signal.SIGTERM)
            handler(signal.SIGTERM, None)
        finally:
            signal.signal(signal.SIGINT, original_int)
            signal.signal(signal.SIGTERM, original_term)

        assert cancellation.is_cancelled()
        logger.log.assert_called_once_with("Cancellation requested. Stopping synchronization...")
