from __future__ import annotations

import uuid


def generate_run_id() -> str:
    """
    Назначение:
        Сгенерировать run_id для сессии импорта или сравнения снимков.
    """
    return str(uuid.uuid4())
