from datetime import datetime, timedelta, timezone

import pytest
from prompt_toolkit.formatted_text import to_plain_text

from dxpaths import utils

NOW = datetime(2024, 6, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def console_output(monkeypatch):
    """Collect console output as plain text instead of writing to the terminal."""
    lines = []

    def _capture(*args, **kwargs):
        if args:
            lines.append(to_plain_text(args[0]))

    monkeypatch.setattr(utils, "_print_pt_original", _capture)
    return lines


@pytest.fixture()
def now():
    return NOW


def make_raw(origin="K1ABC", destination="G0XYZ", frequency_hz=14_097_000, minutes_ago=0,
             now=NOW, **extra):
    record = {
        "origin_call": origin,
        "destination_call": destination,
        "frequency_hz": frequency_hz,
        "observed_at": now - timedelta(minutes=minutes_ago),
    }
    record.update(extra)
    return record
