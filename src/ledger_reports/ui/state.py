"""Global UI state.

NiceGUI apps are typically single-process; the pipeline container here is
process-global. Each page visit gets its own controller (and so its own
report state) from it.
"""

from __future__ import annotations

from dataclasses import dataclass

from ledger_reports.config import Settings, get_settings
from ledger_reports.container import Container


@dataclass(slots=True)
class AppState:
    container: Container | None = None

    def configure(self, settings: Settings | None = None) -> Container:
        self.container = Container(settings or get_settings())
        return self.container

    def require_container(self) -> Container:
        if self.container is None:
            return self.configure()
        return self.container


state = AppState()
