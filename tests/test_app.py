import signal
import threading

import pytest
from attachee.app import AttacheeApp
from attachee.polling_loop import LoopOutcome
from attachee.runtime_info import RUNTIME_DESCRIPTORS


def make_app(console, **overrides):
    config = {
        "interval": 0.001,
        "dump_signal": None,
        "shutdown_signals": [],
    }
    config.update(overrides)
    return AttacheeApp(config, console=console, stop_event=threading.Event())


def test_full_run_output_order(console, lines):
    app = make_app(console, max_iterations=25)

    assert app.run() is LoopOutcome.SHUTDOWN

    out = lines()
    assert out[0].startswith("attachee started. PID: ")
    assert out[0].endswith(str(app.pid))
    assert out[1] == "Runtime Properties:"
    labels = [label for label, _ in RUNTIME_DESCRIPTORS]
    for i, label in enumerate(labels):
        assert out[2 + i].startswith(f"  {label}: ")
    assert out[2 + len(labels)] == ""
    assert out[3 + len(labels):] == [
        "attachee running... counter=10",
        "attachee running... counter=20",
        "attachee exited.",
    ]


def test_shutdown_from_another_thread(console, lines):
    app = make_app(console, interval=0.01)
    timer = threading.Timer(0.3, app.shutdown_handler)
    timer.start()

    assert app.run() is LoopOutcome.SHUTDOWN
    timer.join()

    out = lines()
    assert sum(1 for line in out if line.startswith("attachee started.")) == 1
    assert out[-1] == "attachee exited."
    assert out.count("attachee shutting down...") == 1
    counters = [int(line.rsplit("=", 1)[1]) for line in out if "counter=" in line]
    assert all(c % 10 == 0 for c in counters)
    assert counters == sorted(counters)
    assert all(c <= app.counter for c in counters)


def test_interrupt_ends_with_exited(console, lines):
    app = make_app(console)

    def interrupted_wait(timeout):
        raise KeyboardInterrupt()

    app.loop.wait = interrupted_wait

    assert app.run() is LoopOutcome.INTERRUPTED
    assert app.counter == 1
    assert lines()[-2:] == ["Interrupted: KeyboardInterrupt", "attachee exited."]


def test_signal_handlers_restored(console):
    before = signal.getsignal(signal.SIGTERM)
    seen = []
    app = make_app(console, max_iterations=2, shutdown_signals=[signal.SIGTERM])

    def wait(timeout):
        seen.append(signal.getsignal(signal.SIGTERM))
        return False

    app.loop.wait = wait
    app.run()

    assert seen == [app.shutdown_handler]
    assert signal.getsignal(signal.SIGTERM) == before


def test_pid_file_lifecycle(console, tmp_path):
    pid_path = tmp_path / "run" / "attachee.pid"
    app = make_app(console, max_iterations=2, pid_file=str(pid_path))
    seen = []

    def wait(timeout):
        seen.append(pid_path.read_text())
        return False

    app.loop.wait = wait
    app.run()

    assert seen == [f"{app.pid}\n"]
    assert not pid_path.exists()


def test_pid_file_error_before_banner(console, lines, tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("")
    app = make_app(console, max_iterations=1, pid_file=str(blocker / "attachee.pid"))

    with pytest.raises(OSError):
        app.run()
    assert lines() == []


@pytest.mark.skipif(not hasattr(signal, "SIGUSR1"), reason="SIGUSR1 not available")
def test_dump_signal_registered_and_released(console, monkeypatch):
    import faulthandler

    registered = []
    unregistered = []
    monkeypatch.setattr(faulthandler, "register", lambda signum, **kw: registered.append(signum))
    monkeypatch.setattr(faulthandler, "unregister", lambda signum: unregistered.append(signum))

    app = make_app(console, max_iterations=1, dump_signal=signal.SIGUSR1)
    app.run()

    assert registered == [signal.SIGUSR1]
    assert unregistered == [signal.SIGUSR1]


def test_default_dump_signal_without_stderr_fd(console, lines, monkeypatch, caplog):
    import io
    import sys

    monkeypatch.setattr(sys, "stderr", io.StringIO())
    app = AttacheeApp(
        {"interval": 0.001, "max_iterations": 3, "shutdown_signals": []},
        console=console,
        stop_event=threading.Event(),
    )

    with caplog.at_level("WARNING", logger="attachee"):
        assert app.run() is LoopOutcome.SHUTDOWN

    assert app.counter == 3
    assert lines()[-1] == "attachee exited."
    if app.config["dump_signal"] is not None:
        assert "Thread dump" in caplog.text


def test_interrupt_during_startup_prints_message(console, lines, monkeypatch):
    import attachee.app as app_module

    def interrupted():
        raise KeyboardInterrupt()

    monkeypatch.setattr(app_module, "collect_runtime_properties", interrupted)
    app = make_app(console, shutdown_signals=[signal.SIGTERM])
    before = signal.getsignal(signal.SIGTERM)

    assert app.run() is LoopOutcome.INTERRUPTED
    assert app.counter == 0
    assert lines()[-2:] == ["Interrupted: KeyboardInterrupt", "attachee exited."]
    assert signal.getsignal(signal.SIGTERM) == before


def test_pid_file_removal_failure_is_only_logged(console, lines, tmp_path, monkeypatch, caplog):
    from pathlib import Path

    pid_path = tmp_path / "attachee.pid"
    app = make_app(console, max_iterations=1, pid_file=str(pid_path))

    def failing_unlink(self, *args, **kwargs):
        raise PermissionError("read-only")

    monkeypatch.setattr(Path, "unlink", failing_unlink)
    with caplog.at_level("WARNING", logger="attachee"):
        assert app.run() is LoopOutcome.SHUTDOWN

    assert "Failed to remove PID file" in caplog.text
    out = lines()
    assert out[-1] == "attachee exited."
    assert not any("PID file" in line for line in out)
