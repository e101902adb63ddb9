from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from suncalc import config, twilight  # noqa: E402


@pytest.fixture(autouse=True)
def default_twilight_table(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(twilight, "_TABLE", twilight.DEFAULT_TWILIGHT_ANGLES)
    monkeypatch.setattr(config, "_CONFIGURED_ANGLES", None)
