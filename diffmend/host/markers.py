"""In-memory marker store."""

from __future__ import annotations

import logging

from diffmend.host.interfaces import Marker, Severity

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


class MarkerStore:
    """Collects markers raised during a patch run and logs each one."""

    def __init__(self) -> None:
        self.markers: list[Marker] = []

    def add_marker(self, path: str, severity: Severity, message: str) -> Marker:
        marker = Marker(path=path, severity=severity, message=message)
        self.markers.append(marker)
        logger.log(_LOG_LEVELS[severity], "%s: %s", path, message)
        return marker

    def for_path(self, path: str) -> list[Marker]:
        """Markers attached to path, in the order they were raised."""
        return [marker for marker in self.markers if marker.path == path]

    def clear(self) -> None:
        self.markers.clear()
