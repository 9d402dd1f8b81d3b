"""Tests for the agent log watcher."""

import threading
import time

import pytest

from workbrew_installer.lib.logwatch import LineClass, LogWatcher, classify_line, marker_matcher


def _wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.02)
    return predicate()


def test_classify_line_with_marker():
    match = marker_matcher("ERROR")
    assert classify_line("2024-01-01 ERROR boom", match) is LineClass.ERROR
    assert classify_line("2024-01-01 INFO fine", match) is LineClass.OK
    assert classify_line("error lowercase", match) is LineClass.OK


def test_classify_line_with_injected_matcher():
    assert classify_line("anything", lambda line: True) is LineClass.ERROR
    assert classify_line("anything", lambda line: False) is LineClass.OK


@pytest.fixture
def watcher_factory(tmp_path):
    started = []

    def _make(path, notices):
        lock = threading.Lock()

        def _on_error(line):
            with lock:
                notices.append(line)

        w = LogWatcher(str(path), matcher=marker_matcher("ERROR"), on_error=_on_error, poll_interval=0.02)
        started.append(w)
        return w.start()

    yield _make
    for w in started:
        w.stop()
        w.join(2)


def test_late_file_one_notice_per_error_line(tmp_path, watcher_factory, capsys):
    log = tmp_path / "var" / "agent.log"
    notices = []
    watcher = watcher_factory(log, notices)

    time.sleep(0.1)
    assert watcher.running
    assert not watcher.wait_until_following(0)

    log.parent.mkdir(parents=True)
    log.write_text("", encoding="utf-8")
    assert watcher.wait_until_following(5)

    with log.open("a", encoding="utf-8") as f:
        f.write("INFO starting\n")
        f.write("ERROR cannot reach console\n")
        f.write("INFO retrying\n")
        f.write("ERROR still failing\n")

    assert _wait_for(lambda: len(notices) == 2)
    time.sleep(0.1)
    assert notices == ["ERROR cannot reach console", "ERROR still failing"]
    assert "does not exist yet" in capsys.readouterr().err


def test_existing_content_is_not_replayed(tmp_path, watcher_factory):
    log = tmp_path / "agent.log"
    log.write_text("ERROR from an earlier run\n", encoding="utf-8")
    notices = []
    watcher = watcher_factory(log, notices)
    assert watcher.wait_until_following(5)

    with log.open("a", encoding="utf-8") as f:
        f.write("ERROR new\n")

    assert _wait_for(lambda: notices == ["ERROR new"])


def test_partial_line_waits_for_newline(tmp_path, watcher_factory):
    log = tmp_path / "agent.log"
    log.write_text("", encoding="utf-8")
    notices = []
    watcher = watcher_factory(log, notices)
    assert watcher.wait_until_following(5)

    with log.open("a", encoding="utf-8") as f:
        f.write("ERR")
        f.flush()
        time.sleep(0.1)
        assert notices == []
        f.write("OR split write\n")

    assert _wait_for(lambda: notices == ["ERROR split write"])


def test_truncation_reopens_from_start(tmp_path, watcher_factory):
    log = tmp_path / "agent.log"
    log.write_text("INFO old line that makes the file longer\n", encoding="utf-8")
    notices = []
    watcher = watcher_factory(log, notices)
    assert watcher.wait_until_following(5)

    log.write_text("ERROR x\n", encoding="utf-8")

    assert _wait_for(lambda: notices == ["ERROR x"])


def test_stop_before_file_exists(tmp_path):
    w = LogWatcher(str(tmp_path / "never.log"), matcher=marker_matcher("ERROR"), on_error=print, poll_interval=0.02)
    w.start()
    w.stop()
    w.join(2)
    assert not w.running


def test_start_twice_rejected(tmp_path):
    w = LogWatcher(str(tmp_path / "x.log"), matcher=marker_matcher("ERROR"), on_error=print, poll_interval=0.02)
    w.start()
    try:
        with pytest.raises(RuntimeError):
            w.start()
    finally:
        w.stop()
        w.join(2)


def test_module_entrypoint_follows_until_timeout(tmp_path, capsys):
    from workbrew_installer.lib import logwatch

    log = tmp_path / "agent.log"
    log.write_text("", encoding="utf-8")

    def _writer():
        time.sleep(0.4)
        with log.open("a", encoding="utf-8") as f:
            f.write("INFO ok\n")
            f.write("ERROR enrollment rejected\n")

    t = threading.Thread(target=_writer)
    t.start()
    rc = logwatch.main([str(log), "--poll-interval", "0.02", "--timeout", "1.5", "--support-url", "https://example.invalid"])
    t.join()

    assert rc == 0
    out = capsys.readouterr().out
    assert out.count("Error detected in Workbrew logs") == 1
    assert "ERROR enrollment rejected" in out
    assert "https://example.invalid" in out


def test_watcher_command_targets_module(cfg):
    from workbrew_installer.lib.logwatch import watcher_command

    argv = watcher_command(cfg)
    assert argv[1:4] == ["-m", "workbrew_installer.lib.logwatch", cfg.agent_log_path]
    assert argv[argv.index("--marker") + 1] == "ERROR"
    assert argv[argv.index("--poll-interval") + 1] == "0.05"
