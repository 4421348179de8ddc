import threading

import pytest

from logwriter import log_writer
from logwriter.log_writer import InvalidState


@pytest.fixture
def log_path(tmp_path, monkeypatch):
    path = tmp_path / "logs" / "app.log"
    monkeypatch.setenv("LOGWRITER_LOG_PATH", str(path))
    monkeypatch.setenv("LOGWRITER_DIAGNOSTIC_ECHO", "false")
    monkeypatch.setattr(log_writer, "_instance", None)
    yield path
    if log_writer._instance is not None:
        log_writer.shutdown()


def test_get_instance_returns_same_writer(log_path):
    first = log_writer.get_instance()
    second = log_writer.get_instance()

    assert first is second
    assert first.path == log_path
    assert log_path.parent.is_dir()


def test_shutdown_resets_and_reopens_in_append_mode(log_path):
    first = log_writer.get_instance()
    first.info("before shutdown")
    log_writer.shutdown()

    assert first.closed
    second = log_writer.get_instance()
    assert second is not first
    second.info("after shutdown")
    log_writer.shutdown()

    content = log_path.read_text(encoding="utf-8")
    assert content.index("before shutdown") < content.index("after shutdown")


def test_shutdown_without_instance_raises(log_path):
    with pytest.raises(InvalidState):
        log_writer.shutdown()


def test_double_shutdown_raises(log_path):
    log_writer.get_instance()
    log_writer.shutdown()
    with pytest.raises(InvalidState):
        log_writer.shutdown()


def test_module_level_calls_create_instance(log_path):
    assert log_writer._instance is None
    log_writer.info("{0} items", 5)

    instance = log_writer._instance
    assert instance is not None
    assert instance.pending_count == 1


def test_module_level_helpers_cover_all_severities(log_path):
    log_writer.verbose("v")
    log_writer.debug("d")
    log_writer.info("i")
    log_writer.warn("w")
    log_writer.error("e")
    log_writer.exception(ValueError("x"), "with error")
    log_writer.shutdown()

    lines = [line for line in log_path.read_text(encoding="utf-8").splitlines() if " | " in line]
    labels = [line[20:27].strip() for line in lines]
    assert labels == ["Debug", "Info", "Warn", "Error", "Error"]


def test_flush_threshold_from_environment(log_path, monkeypatch):
    monkeypatch.setenv("LOGWRITER_FLUSH_THRESHOLD", "2")

    log_writer.info("a")
    log_writer.info("b")

    assert log_writer.get_instance().pending_count == 0
    assert "| b" in log_path.read_text(encoding="utf-8")


def test_concurrent_first_access_creates_one_instance(log_path):
    threads_count = 16
    barrier = threading.Barrier(threads_count)
    instances = []

    def grab():
        barrier.wait()
        instances.append(log_writer.get_instance())

    threads = [threading.Thread(target=grab) for _ in range(threads_count)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(instances) == threads_count
    assert len({id(instance) for instance in instances}) == 1
    assert instances[0] is log_writer.get_instance()
