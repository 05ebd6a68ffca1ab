from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import json
import logging
from PySide6.QtCore import QSettings

logger = logging.getLogger(__name__)

# Characters per line for the common paper stocks (Font A).
CHARACTER_WIDTH_BY_PAPER_MM = {58: 32, 80: 48}


@dataclass
class PrinterProfile:
    """
    A named printer configuration.

    - name: what the user picks ("Kitchen TM-T88IV", "Front Desk 58mm")
    - config: printer config dict (interface, host, port, paper_width_mm, ...)
    """
    name: str = "Default"
    config: Dict[str, Any] = field(default_factory=dict)

    @property
    def character_width(self) -> int:
        """Explicit ``character_width`` from config, else derived from the paper width."""
        explicit = self.config.get("character_width")
        if isinstance(explicit, int) and explicit > 0:
            return explicit
        paper = self.config.get("paper_width_mm", 58)
        try:
            paper = int(paper)
        except (TypeError, ValueError):
            paper = 58
        return CHARACTER_WIDTH_BY_PAPER_MM.get(paper, 48 if paper > 58 else 32)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PrinterProfile":
        return cls(name=data.get("name", "Unnamed"), config=dict(data.get("config") or {}))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "config": self.config or {},
        }


def _settings() -> QSettings:
    return QSettings("ReceiptEngine", "ReceiptEngine")


def load_profiles(settings: Optional[QSettings] = None) -> List[PrinterProfile]:
    """
    Load printer profiles from QSettings.

    Falls back to a single empty "Default" profile when nothing is stored
    or the stored JSON cannot be read.
    """
    s = settings or _settings()
    raw = s.value("printer_profiles", "", type=str)

    if raw:
        try:
            profiles = [PrinterProfile.from_dict(d) for d in json.loads(raw)]
            if profiles:
                return profiles
        except (ValueError, TypeError, AttributeError):
            logger.warning("Stored printer profiles are unreadable; using defaults")

    return [PrinterProfile(name="Default")]


def save_profiles(profiles: List[PrinterProfile], settings: Optional[QSettings] = None) -> None:
    """Persist printer profiles to QSettings as JSON."""
    s = settings or _settings()
    s.setValue("printer_profiles", json.dumps([p.to_dict() for p in profiles], indent=2))


def find_profile(name: str, settings: Optional[QSettings] = None) -> Optional[PrinterProfile]:
    for profile in load_profiles(settings):
        if profile.name == name:
            return profile
    return None
