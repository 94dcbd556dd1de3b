"""Tests for core/environment.py and core/cache.py."""

from __future__ import annotations

from evvl.core.cache import TTLCache
from evvl.core.environment import RuntimeEnvironment, detect_runtime_environment


class TestDetectRuntimeEnvironment:
    def test_configured_wins(self):
        env = {"EVVL_RUNTIME": "web", "TAURI_ENV_PLATFORM": "linux"}
        assert detect_runtime_environment("desktop", env) == RuntimeEnvironment.DESKTOP

    def test_auto_uses_env_var(self):
        assert detect_runtime_environment("auto", {"EVVL_RUNTIME": "Desktop"}) == RuntimeEnvironment.DESKTOP

    def test_desktop_marker(self):
        assert detect_runtime_environment(None, {"EVVL_DESKTOP": "1"}) == RuntimeEnvironment.DESKTOP

    def test_defaults_to_web(self):
        assert detect_runtime_environment(None, {}) == RuntimeEnvironment.WEB
        assert detect_runtime_environment("something", {}) == RuntimeEnvironment.WEB


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class TestTTLCache:
    def test_hit_before_expiry(self):
        clock = FakeClock()
        cache = TTLCache(60, clock=clock)
        cache.set("k", [1])
        clock.now = 59
        assert cache.get("k") == [1]

    def test_expires(self):
        clock = FakeClock()
        cache = TTLCache(60, clock=clock)
        cache.set("k", [1])
        clock.now = 60
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_invalidate_and_clear(self):
        cache = TTLCache(60)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.invalidate("a")
        assert cache.get("a") is None
        cache.clear()
        assert len(cache) == 0
