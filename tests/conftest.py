import os
from typing import Any

import pytest

# Monkeypatch coverage to bypass teardown crash in act/docker
if os.getenv("COVERAGE_PROCESS_START"):
    import coverage

    coverage.process_startup()

    import coverage.collector

    def safe_stop(self: Any) -> None:
        if self in getattr(self, "_collectors", []):
            self._collectors.remove(self)

    coverage.collector.Collector.stop = safe_stop


INPUT_FIDL_ASSIGNMENT = """
  sources = [
    "ime_service.fidl",
    "input_connection.fidl",
    "input_device_registry.fidl",
    "input_dispatcher.fidl",
    "input_event_constants.fidl",
    "input_events.fidl",
    "input_reports.fidl",
    "text_editing.fidl",
    "text_input.fidl",
    "usages.fidl",
  ]
"""

INPUT_FIDL_BLOCK = (
    "{"
    + INPUT_FIDL_ASSIGNMENT
    + """
  public_deps = [
    "//apps/mozart/services/geometry",
    "//apps/mozart/services/views:view_token",
  ]
}
"""
)

INPUT_FIDL = 'fidl("input") ' + INPUT_FIDL_BLOCK


@pytest.fixture  # type: ignore[misc]
def input_fidl() -> str:
    return INPUT_FIDL


@pytest.fixture  # type: ignore[misc]
def input_fidl_block() -> str:
    return INPUT_FIDL_BLOCK


@pytest.fixture  # type: ignore[misc]
def input_fidl_assignment() -> str:
    return INPUT_FIDL_ASSIGNMENT
