from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

LOG = logging.getLogger(__name__)

DEFAULT_PRESETS: dict[str, dict[str, Any]] = {
    "Default": {
        "epsilon": 0.0001,
    },
    # Sources that went through a lossy round trip drift further apart.
    "Lossy Source": {
        "epsilon": 0.001,
    },
    "Bit Exact": {
        "epsilon": 1e-12,
    },
}


class ConfigManager:
    """Load/save presets and config overrides for Mono Catcher."""

    def __init__(self, config_path: str | Path | None = None, presets_path: str | Path | None = None):
        self.config_path = Path(config_path) if config_path else None
        self.presets_path = Path(presets_path) if presets_path else None

    def load_config(self) -> dict[str, Any]:
        if self.config_path is None:
            return {}
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config file not found: {self.config_path}")
        data = json.loads(self.config_path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Config file must hold a JSON object: {self.config_path}")
        return data

    def load_presets(self) -> dict[str, dict[str, Any]]:
        if self.presets_path is not None and self.presets_path.exists():
            presets = json.loads(self.presets_path.read_text(encoding="utf-8"))
            merged = dict(presets)
            for name, values in DEFAULT_PRESETS.items():
                merged.setdefault(name, values)
            return merged
        return dict(DEFAULT_PRESETS)

    def save_presets(self, presets: dict[str, dict[str, Any]]) -> None:
        if self.presets_path is None:
            raise ValueError("No presets path configured.")
        self.presets_path.parent.mkdir(parents=True, exist_ok=True)
        self.presets_path.write_text(json.dumps(presets, indent=2), encoding="utf-8")

    def list_presets(self) -> list[str]:
        return sorted(self.load_presets().keys())

    def get_preset(self, name: str) -> dict[str, Any]:
        presets = self.load_presets()
        if name not in presets:
            LOG.warning("Unknown preset %r, using Default.", name)
        return dict(presets.get(name, DEFAULT_PRESETS["Default"]))


def apply_overrides(config: Any, overrides: dict[str, Any]) -> list[str]:
    """Copy known keys onto a config dataclass. Returns the keys that were ignored."""
    ignored = []
    for key, value in overrides.items():
        if hasattr(config, key):
            setattr(config, key, value)
        else:
            ignored.append(key)
    if ignored:
        LOG.warning("Ignoring unknown config keys: %s", ", ".join(sorted(ignored)))
    return ignored
