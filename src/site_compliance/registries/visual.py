"""Text alternatives for images and icons.

Visual validators look at every matching image/icon inside a scope element
(usually ``body``) and list the ones that break the rule. The content type
refines a rule: "Descriptive" content images need meaningful alt text, and
"Purpose/action" icons need a label that names what they do.
"""

import re
from abc import abstractmethod
from typing import List, Optional

from site_compliance.browser import BrowserSession
from site_compliance.models import ElementRef
from site_compliance.registries.base import ElementValidator, ValidatorRegistry
from site_compliance.scripts import ELEMENT_EXISTS, NATURAL_SIZE

DECORATIVE_MAX_PX = 50
GENERIC_ALT_RE = re.compile(r"image|img", re.IGNORECASE)

DESCRIPTIVE = "descriptive"
PURPOSE_ACTION = "purpose/action"


async def _visible(session: BrowserSession, selector: str, scope: ElementRef) -> List[ElementRef]:
    return [el for el in await session.query(selector, within=scope) if await session.is_visible(el)]


async def _is_small(session: BrowserSession, image: ElementRef) -> bool:
    size = await session.evaluate_on(image, NATURAL_SIZE) or {}
    return size.get("width", 0) <= DECORATIVE_MAX_PX and size.get("height", 0) <= DECORATIVE_MAX_PX


async def _describe(session: BrowserSession, element: ElementRef) -> str:
    src = await session.get_attribute(element, "src")
    return src or await session.get_attribute(element, "id") or "(unnamed)"


class VisualElementValidator(ElementValidator):
    """Rule over all visual elements of one kind inside a scope element."""

    def __init__(self, content_type: str = "") -> None:
        self.content_type = content_type.strip().lower()

    def for_content(self, content_type: str) -> "VisualElementValidator":
        return type(self)(content_type)

    @abstractmethod
    async def violations(self, session: BrowserSession, scope: ElementRef) -> List[str]:
        """Human-readable description of each offending element."""
        pass

    async def check(self, session: BrowserSession, element: ElementRef) -> bool:
        return not await self.violations(session, element)


class ContentImageValidator(VisualElementValidator):
    description = "content images have alt text"

    async def violations(self, session: BrowserSession, scope: ElementRef) -> List[str]:
        problems = []
        for image in await _visible(session, "img", scope):
            if await _is_small(session, image):
                continue
            alt = (await session.get_attribute(image, "alt") or "").strip()
            name = await _describe(session, image)
            if not alt:
                problems.append(f"{name}: missing alt text")
            elif self.content_type == DESCRIPTIVE and (len(alt) <= 3 or GENERIC_ALT_RE.search(alt)):
                problems.append(f"{name}: alt text {alt!r} is not descriptive")
        return problems


class DecorativeImageValidator(VisualElementValidator):
    description = "decorative images have empty alt text"

    async def violations(self, session: BrowserSession, scope: ElementRef) -> List[str]:
        problems = []
        for image in await _visible(session, "img", scope):
            role = await session.get_attribute(image, "role")
            hidden = await session.get_attribute(image, "aria-hidden")
            decorative = role == "presentation" or hidden == "true" or await _is_small(session, image)
            if not decorative:
                continue
            alt = await session.get_attribute(image, "alt")
            if alt not in (None, ""):
                problems.append(f"{await _describe(session, image)}: decorative image has alt {alt!r}")
        return problems


class SvgIconValidator(VisualElementValidator):
    description = "svg icons have an accessible name"

    async def violations(self, session: BrowserSession, scope: ElementRef) -> List[str]:
        problems = []
        for index, svg in enumerate(await _visible(session, "svg", scope)):
            label = await session.get_attribute(svg, "aria-label")
            titles = await session.query("title", within=svg)
            title_text = (await session.text_content(titles[0]) or "").strip() if titles else ""
            name = f"svg[{index}]"
            if not label and not titles:
                problems.append(f"{name}: no aria-label or <title>")
            elif self.content_type == PURPOSE_ACTION and not (label or title_text):
                problems.append(f"{name}: label does not describe its purpose")
        return problems


class ComplexImageValidator(VisualElementValidator):
    description = "aria-describedby on complex images points at an existing element"

    async def violations(self, session: BrowserSession, scope: ElementRef) -> List[str]:
        problems = []
        for image in await session.query("img[aria-describedby]", within=scope):
            described_by = (await session.get_attribute(image, "aria-describedby") or "").strip()
            name = await _describe(session, image)
            if not described_by:
                problems.append(f"{name}: empty aria-describedby")
                continue
            for ref_id in described_by.split():
                if not await session.evaluate(ELEMENT_EXISTS, ref_id):
                    problems.append(f"{name}: aria-describedby references missing #{ref_id}")
        return problems


class VisualElementRegistry(ValidatorRegistry[VisualElementValidator]):
    kind = "visual element type"

    def __init__(self, unknown_policy: Optional[str] = None) -> None:
        super().__init__(
            [
                ("content images", ContentImageValidator()),
                ("decorative", DecorativeImageValidator()),
                ("svg icons", SvgIconValidator()),
                ("complex images", ComplexImageValidator()),
            ],
            unknown_policy=unknown_policy,
        )

    def for_content(self, element_type: str, content_type: str = "") -> Optional[VisualElementValidator]:
        """Resolve *element_type* and bind it to *content_type*."""
        validator = self.resolve(element_type)
        if validator is None:
            return None
        return validator.for_content(content_type)
