from __future__ import annotations

import pytest

from powersnap.domain.exceptions import FileAccessError
from powersnap.infra.sources import file_access
from powersnap.infra.sources.file_access import ensure_readable


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def test_missing_file_fails_without_waiting(tmp_path):
    clock = FakeClock()

    with pytest.raises(FileAccessError) as exc_info:
        ensure_readable(str(tmp_path / "missing.csv"), sleep=clock.sleep, clock=clock)

    assert exc_info.value.reason == "file not found"
    assert clock.sleeps == []


def test_readable_file_returns_immediately(tmp_path):
    path = tmp_path / "export.csv"
    path.write_text("Bus ID\n", encoding="utf-8")
    clock = FakeClock()

    ensure_readable(str(path), sleep=clock.sleep, clock=clock)

    assert clock.sleeps == []


def test_locked_file_is_retried_until_timeout(tmp_path, monkeypatch):
    path = tmp_path / "export.csv"
    path.write_text("Bus ID\n", encoding="utf-8")
    clock = FakeClock()

    def locked_open(*args, **kwargs):
        raise PermissionError("file is locked")

    monkeypatch.setattr(file_access, "open", locked_open, raising=False)

    with pytest.raises(FileAccessError) as exc_info:
        ensure_readable(str(path), timeout_seconds=1.0, interval_seconds=0.25, sleep=clock.sleep, clock=clock)

    assert clock.sleeps == [0.25, 0.25, 0.25, 0.25]
    assert exc_info.value.waited_seconds == pytest.approx(1.0)
    assert "close the file" in str(exc_info.value)


def test_file_released_during_wait_is_read(tmp_path, monkeypatch):
    path = tmp_path / "export.csv"
    path.write_text("Bus ID\n", encoding="utf-8")
    clock = FakeClock()
    real_open = open
    attempts = []

    def flaky_open(*args, **kwargs):
        attempts.append(args[0])
        if len(attempts) < 3:
            raise PermissionError("file is locked")
        return real_open(*args, **kwargs)

    monkeypatch.setattr(file_access, "open", flaky_open, raising=False)

    ensure_readable(str(path), timeout_seconds=5.0, interval_seconds=0.5, sleep=clock.sleep, clock=clock)

    assert len(attempts) == 3
    assert clock.sleeps == [0.5, 0.5]
