"""Runtime configuration for compliance audits.

Values are read from the environment first, then from `.env` /
`.env.defaults` (see :mod:`site_compliance.env_defaults`), then from the
dataclass defaults below. Invalid values raise ``ValueError`` at load time.
"""
from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Callable, Dict, Optional
from urllib.parse import urljoin

from site_compliance.env_defaults import env_value

BROWSER_TYPES = ("chromium", "firefox", "webkit")
UNKNOWN_RULE_POLICIES = ("raise", "warn")


def _parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in {"true", "1", "yes", "on"}:
        return True
    if value in {"false", "0", "no", "off"}:
        return False
    raise ValueError(f"expected a boolean, got {raw!r}")


def _parse_non_negative_int(raw: str) -> int:
    value = int(raw)
    if value < 0:
        raise ValueError(f"expected a non-negative integer, got {raw!r}")
    return value


def _parse_ratio(raw: str) -> float:
    value = float(raw)
    if not 1.0 <= value <= 21.0:
        raise ValueError(f"contrast ratio must be within [1, 21], got {raw!r}")
    return value


def _parse_choice(choices: tuple[str, ...]) -> Callable[[str], str]:
    def parse(raw: str) -> str:
        value = raw.strip().lower()
        if value not in choices:
            raise ValueError(f"expected one of {', '.join(choices)}, got {raw!r}")
        return value
    return parse


@dataclass(frozen=True)
class ComplianceConfig:
    """Tunable thresholds, delays and browser options for one audit."""

    playwright_headless: bool = True
    playwright_browser: str = "chromium"
    playwright_timeout_ms: int = 30000
    base_url: Optional[str] = None

    unknown_rules: str = "raise"

    min_contrast: float = 4.5
    min_contrast_large: float = 3.0

    tab_settle_ms: int = 50
    focus_reset_ms: int = 100
    interaction_settle_ms: int = 300
    viewport_settle_ms: int = 100

    stuck_window: int = 3
    stuck_ledger_limit: int = 5
    max_tab_steps: int = 50

    metrics_budget_ms: int = 1000
    min_touch_target: int = 44

    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.playwright_browser not in BROWSER_TYPES:
            raise ValueError(f"Unsupported browser type: {self.playwright_browser}")
        if self.unknown_rules not in UNKNOWN_RULE_POLICIES:
            raise ValueError(f"Unknown rule policy must be 'raise' or 'warn', got {self.unknown_rules!r}")
        if self.min_contrast_large > self.min_contrast:
            raise ValueError("min_contrast_large must not exceed min_contrast")
        if self.stuck_window < 1 or self.stuck_ledger_limit < 1:
            raise ValueError("stuck_window and stuck_ledger_limit must be at least 1")
        if self.max_tab_steps < 1:
            raise ValueError("max_tab_steps must be at least 1")

    @classmethod
    def from_env(cls) -> "ComplianceConfig":
        """Build a config from environment variables and `.env*` defaults."""
        kwargs: Dict[str, Any] = {}
        for field_name, (key, parser) in ENV_KEYS.items():
            raw = env_value(key)
            if raw is None or raw == "":
                continue
            try:
                kwargs[field_name] = parser(raw)
            except ValueError as exc:
                raise ValueError(f"Invalid value for {key}: {exc}") from exc
        return cls(**kwargs)

    def with_overrides(self, **overrides: Any) -> "ComplianceConfig":
        """Return a copy with selected fields replaced (validated again)."""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ValueError(f"Unknown config fields: {', '.join(sorted(unknown))}")
        return replace(self, **overrides)

    def url(self, path: str = "/") -> str:
        """Resolve *path* against ``base_url``."""
        if not self.base_url:
            raise ValueError("SITE_BASE_URL is not configured")
        return urljoin(self.base_url.rstrip("/") + "/", path.lstrip("/"))


ENV_KEYS: Dict[str, tuple[str, Callable[[str], Any]]] = {
    "playwright_headless": ("PLAYWRIGHT_HEADLESS", _parse_bool),
    "playwright_browser": ("PLAYWRIGHT_BROWSER", _parse_choice(BROWSER_TYPES)),
    "playwright_timeout_ms": ("PLAYWRIGHT_TIMEOUT_MS", _parse_non_negative_int),
    "base_url": ("SITE_BASE_URL", str),
    "unknown_rules": ("SITE_COMPLIANCE_UNKNOWN_RULES", _parse_choice(UNKNOWN_RULE_POLICIES)),
    "min_contrast": ("SITE_COMPLIANCE_MIN_CONTRAST", _parse_ratio),
    "min_contrast_large": ("SITE_COMPLIANCE_MIN_CONTRAST_LARGE", _parse_ratio),
    "tab_settle_ms": ("SITE_COMPLIANCE_TAB_SETTLE_MS", _parse_non_negative_int),
    "focus_reset_ms": ("SITE_COMPLIANCE_FOCUS_RESET_MS", _parse_non_negative_int),
    "interaction_settle_ms": ("SITE_COMPLIANCE_INTERACTION_SETTLE_MS", _parse_non_negative_int),
    "viewport_settle_ms": ("SITE_COMPLIANCE_VIEWPORT_SETTLE_MS", _parse_non_negative_int),
    "stuck_window": ("SITE_COMPLIANCE_STUCK_WINDOW", _parse_non_negative_int),
    "stuck_ledger_limit": ("SITE_COMPLIANCE_STUCK_LEDGER_LIMIT", _parse_non_negative_int),
    "max_tab_steps": ("SITE_COMPLIANCE_MAX_TAB_STEPS", _parse_non_negative_int),
    "metrics_budget_ms": ("SITE_COMPLIANCE_METRICS_BUDGET_MS", _parse_non_negative_int),
    "min_touch_target": ("SITE_COMPLIANCE_MIN_TOUCH_TARGET", _parse_non_negative_int),
    "log_level": ("LOG_LEVEL", lambda raw: raw.strip().upper()),
}


settings = ComplianceConfig.from_env()
