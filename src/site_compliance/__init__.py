"""
Site compliance engine.

Checks a live page for WCAG contrast, keyboard tab order and focus traps,
rule-based visual/interaction requirements, responsive layout and Core Web
Vitals, driving the page through Playwright.

Usage:
    from site_compliance import ComplianceOrchestrator, browser_session

    async with browser_session() as session:
        await session.goto("https://example.com")
        audit = ComplianceOrchestrator(session)
        result = await audit.check_contrast("h1")
"""

from .browser import BrowserSession, PlaywrightSession, ToolError, browser_session
from .config import ComplianceConfig, settings
from .contrast import contrast_ratio, relative_luminance
from .models import CheckResult, ElementIdentity, StopReason, TabOrderReport
from .orchestrator import ComplianceOrchestrator
from .registries import UnknownRuleError
from .tab_order import TabOrderAnalyzer

__version__ = "1.0.0"

__all__ = [
    'BrowserSession',
    'PlaywrightSession',
    'ToolError',
    'browser_session',
    'ComplianceConfig',
    'settings',
    'contrast_ratio',
    'relative_luminance',
    'CheckResult',
    'ElementIdentity',
    'StopReason',
    'TabOrderReport',
    'ComplianceOrchestrator',
    'UnknownRuleError',
    'TabOrderAnalyzer',
]
