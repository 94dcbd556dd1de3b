"""Runtime environment detection (web vs. desktop)."""

from __future__ import annotations

import os
from enum import Enum
from typing import Mapping, Optional

RUNTIME_ENV_VAR = "EVVL_RUNTIME"
_DESKTOP_MARKERS = ("EVVL_DESKTOP", "TAURI_ENV_PLATFORM")


class RuntimeEnvironment(str, Enum):
    WEB = "web"
    DESKTOP = "desktop"


def detect_runtime_environment(
    configured: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> RuntimeEnvironment:
    """Resolve the runtime environment.

    An explicit ``configured`` value ("web"/"desktop") wins; "auto" or None
    falls back to ``EVVL_RUNTIME`` and then to desktop marker variables.
    Anything unrecognised is treated as web.
    """
    env = os.environ if environ is None else environ

    for candidate in (configured, env.get(RUNTIME_ENV_VAR)):
        value = (candidate or "").strip().lower()
        if value in ("desktop", "tauri"):
            return RuntimeEnvironment.DESKTOP
        if value == "web":
            return RuntimeEnvironment.WEB

    if any(env.get(marker) for marker in _DESKTOP_MARKERS):
        return RuntimeEnvironment.DESKTOP
    return RuntimeEnvironment.WEB
