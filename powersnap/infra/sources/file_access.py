from __future__ import annotations

import time
from pathlib import Path
from typing import Callable

from powersnap.domain.exceptions import FileAccessError

DEFAULT_TIMEOUT_SECONDS = 5.0
DEFAULT_INTERVAL_SECONDS = 0.25


def ensure_readable(
    path: str,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    *,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> None:
    """
    Назначение:
        Дождаться, пока файл можно открыть на чтение (экспорт может быть ещё
        открыт в приложении, которое его создало).

    Алгоритм:
        - Отсутствующий файл -> FileAccessError сразу, без повторов.
        - Иначе попытки открыть с фиксированным интервалом до общего таймаута.

    Ошибки:
        FileAccessError после исчерпания таймаута.
    """
    if not Path(path).is_file():
        raise FileAccessError(path=path, reason="file not found")

    started = clock()
    deadline = started + timeout_seconds
    while True:
        try:
            with open(path, "rb") as f:
                f.read(1)
            return
        except OSError as exc:
            last_error = exc
        now = clock()
        if now >= deadline:
            raise FileAccessError(
                path=path,
                reason=f"{last_error}; close the file in the application that holds it and retry",
                waited_seconds=now - started,
            )
        sleep(min(interval_seconds, max(deadline - now, 0.0)))
