from __future__ import annotations

from .load import load_config
from .schema import AppConfig, EnvOverrides, ExportConfig, LinkClassificationConfig

__all__ = [
    "AppConfig",
    "EnvOverrides",
    "ExportConfig",
    "LinkClassificationConfig",
    "load_config",
]
