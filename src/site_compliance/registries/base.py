"""
Keyed validator registries.

Every rule family (cues, states, adaptations, layout, ...) is a small map
from a human label to a validator object. Labels are matched without regard
to case, so "Hover" and "hover" name the same rule. What happens on an
unknown label is the registry's policy: raise, or warn and skip.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Generic, Iterable, List, Optional, Tuple, TypeVar

from site_compliance.browser import BrowserSession
from site_compliance.config import settings
from site_compliance.models import ElementRef

logger = logging.getLogger(__name__)


class UnknownRuleError(LookupError):
    """Raised when a registry has no validator for a label."""
    pass


class UnknownRulePolicy:
    RAISE = "raise"
    WARN = "warn"

    ALL = (RAISE, WARN)


class ElementValidator(ABC):
    """A named boolean check against one element."""

    description: str = ""

    @abstractmethod
    async def check(self, session: BrowserSession, element: ElementRef) -> bool:
        """Evaluate the rule.

        Args:
            session: Browser session the element belongs to
            element: Element handle to inspect

        Returns:
            True when the element satisfies the rule
        """
        pass


V = TypeVar("V")


class ValidatorRegistry(Generic[V]):
    """Case-insensitive label -> validator map with an unknown-label policy."""

    kind = "rule"

    def __init__(
        self,
        validators: Optional[Iterable[Tuple[str, V]]] = None,
        unknown_policy: Optional[str] = None,
    ) -> None:
        policy = unknown_policy or settings.unknown_rules
        if policy not in UnknownRulePolicy.ALL:
            raise ValueError(f"Unknown rule policy must be 'raise' or 'warn', got {policy!r}")
        self.unknown_policy = policy
        self._validators: Dict[str, V] = {}
        for label, validator in validators or ():
            self.register(label, validator)

    @staticmethod
    def normalize(label: str) -> str:
        return label.strip().lower()

    def register(self, label: str, validator: V) -> None:
        """Add or replace the validator for *label*."""
        key = self.normalize(label)
        if key in self._validators:
            logger.debug(f"Replacing {self.kind} validator: {key}")
        self._validators[key] = validator

    def get(self, label: str) -> Optional[V]:
        return self._validators.get(self.normalize(label))

    def resolve(self, label: str) -> Optional[V]:
        """Validator for *label*, applying the unknown-label policy on a miss.

        Raises:
            UnknownRuleError: If the label is unknown and the policy is "raise"
        """
        validator = self.get(label)
        if validator is not None:
            return validator
        message = (
            f"Unknown {self.kind}: {label!r} "
            f"(known: {', '.join(self.labels()) or 'none'})"
        )
        if self.unknown_policy == UnknownRulePolicy.RAISE:
            raise UnknownRuleError(message)
        logger.warning(f"{message}; skipping")
        return None

    def labels(self) -> List[str]:
        return sorted(self._validators)

    def __contains__(self, label: object) -> bool:
        return isinstance(label, str) and self.normalize(label) in self._validators

    def __len__(self) -> int:
        return len(self._validators)
