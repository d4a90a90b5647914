"""Page-context functions evaluated inside the browser.

Each :class:`PageScript` is a self-contained JavaScript function. It closes
over nothing and receives everything it needs through its single argument,
or through ``(element, arg)`` when evaluated on an element handle. The
``name`` lets test doubles answer a script without parsing JavaScript.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PageScript:
    """A named JavaScript function value."""

    name: str
    source: str

    def __str__(self) -> str:
        return self.source


# --- focus ---------------------------------------------------------------

FOCUSED_IDENTITY = PageScript("focused_identity", """
(_arg) => {
  const el = document.activeElement;
  if (!el) return null;
  return {
    tag: el.tagName.toLowerCase(),
    role: el.getAttribute("role"),
    type: el.getAttribute("type"),
    id: el.id || null,
    ariaLabel: el.getAttribute("aria-label"),
    text: (el.textContent || "").trim().substring(0, 30),
  };
}
""")

BLUR_ACTIVE = PageScript("blur_active", """
(_arg) => {
  const el = document.activeElement;
  if (el && el !== document.body && typeof el.blur === "function") {
    el.blur();
  }
}
""")

ACTIVE_MATCHES = PageScript("active_matches", """
(selector) => {
  const el = document.activeElement;
  return !!el && el !== document.body && el.matches(selector);
}
""")

COUNT_FOCUSABLE = PageScript("count_focusable", """
(selector) => {
  return Array.from(document.querySelectorAll(selector)).filter((el) => {
    if (el.disabled || el.getAttribute("aria-disabled") === "true") return false;
    const style = window.getComputedStyle(el);
    if (style.visibility === "hidden" || style.display === "none") return false;
    const rect = el.getBoundingClientRect();
    return rect.width > 0 && rect.height > 0;
  }).length;
}
""")

# --- element reads (evaluated on an element handle) -----------------------

COMPUTED_STYLE = PageScript("computed_style", """
(el, prop) => {
  const style = window.getComputedStyle(el);
  const kebab = prop.replace(/[A-Z]/g, (m) => "-" + m.toLowerCase());
  const value = style.getPropertyValue(kebab);
  if (value !== "") return value;
  return typeof style[prop] === "string" && style[prop] !== "" ? style[prop] : null;
}
""")

KEYBOARD_PROFILE = PageScript("keyboard_profile", """
(el, _arg) => {
  const tag = el.tagName.toLowerCase();
  const disabled = !!el.disabled || el.getAttribute("aria-disabled") === "true";
  const native = ["a", "button", "input", "select", "textarea", "details"];
  const hasHref = tag === "a" && !!el.getAttribute("href");
  const style = window.getComputedStyle(el);
  const outline = style.outlineStyle !== "none" && parseFloat(style.outlineWidth) > 0;
  const shadow = style.boxShadow !== "none" && !style.boxShadow.includes("inset");
  const role = el.getAttribute("role") || "";
  return {
    focusable: !disabled && (native.includes(tag) || hasHref || el.tabIndex >= 0),
    focusIndicator: outline || shadow,
    operable:
      el.hasAttribute("onclick") ||
      hasHref ||
      ["button", "link", "checkbox", "radio"].includes(role) ||
      ["input", "select", "textarea", "button"].includes(tag),
  };
}
""")

TAG_NAME = PageScript("tag_name", """
(el, _arg) => el.tagName.toLowerCase()
""")

HAS_DESCENDANT = PageScript("has_descendant", """
(el, selector) => el.querySelector(selector) !== null
""")

NATURAL_SIZE = PageScript("natural_size", """
(el, _arg) => ({
  width: el.naturalWidth || el.width || 0,
  height: el.naturalHeight || el.height || 0,
})
""")

ELEMENT_EXISTS = PageScript("element_exists", """
(id) => document.getElementById(id) !== null
""")

# --- performance ----------------------------------------------------------

PERFORMANCE_METRICS = PageScript("performance_metrics", """
(budgetMs) => new Promise((resolve) => {
  const metrics = { lcp: null, fid: null, cls: 0, timedOut: false };
  const observers = [];
  let pending = 2;
  let resolved = false;

  const computeCls = () => {
    let sum = 0;
    for (const entry of performance.getEntriesByType("layout-shift")) {
      if (!entry.hadRecentInput) sum += entry.value;
    }
    metrics.cls = sum;
  };

  const finish = (timedOut) => {
    if (resolved) return;
    resolved = true;
    metrics.timedOut = timedOut;
    observers.forEach((observer) => {
      try { observer.disconnect(); } catch (error) {}
    });
    computeCls();
    resolve(metrics);
  };

  const observe = (type, onEntry) => {
    try {
      const observer = new PerformanceObserver((list) => {
        const entries = list.getEntries();
        if (entries.length === 0) return;
        onEntry(entries);
        observer.disconnect();
        pending -= 1;
        if (pending === 0) finish(false);
      });
      observer.observe({ type, buffered: true });
      observers.push(observer);
    } catch (error) {}
  };

  observe("largest-contentful-paint", (entries) => {
    metrics.lcp = entries[entries.length - 1].startTime;
  });
  observe("first-input", (entries) => {
    metrics.fid = entries[0].processingStart - entries[0].startTime;
  });

  setTimeout(() => finish(true), budgetMs);
})
""")

NAVIGATION_TIMING = PageScript("navigation_timing", """
(_arg) => {
  const nav = performance.getEntriesByType("navigation")[0];
  const fcp = performance.getEntriesByName("first-contentful-paint")[0];
  return {
    ttfb: nav ? nav.responseStart : null,
    fcp: fcp ? fcp.startTime : null,
    domContentLoaded: nav ? nav.domContentLoadedEventEnd : null,
    load: nav ? nav.loadEventEnd : null,
  };
}
""")

# --- page structure -------------------------------------------------------

PAGE_TITLE = PageScript("page_title", """
(_arg) => document.title
""")

HTML_LANG = PageScript("html_lang", """
(_arg) => document.documentElement.getAttribute("lang")
""")

VISIBLE_HEADING_LEVELS = PageScript("visible_heading_levels", """
(_arg) => Array.from(document.querySelectorAll("h1, h2, h3, h4, h5, h6"))
  .filter((el) => {
    const rect = el.getBoundingClientRect();
    const style = window.getComputedStyle(el);
    return rect.width > 0 && rect.height > 0 && style.visibility !== "hidden";
  })
  .map((el) => parseInt(el.tagName.substring(1), 10))
""")

LANDMARK_COUNTS = PageScript("landmark_counts", """
(_arg) => ({
  header: document.querySelectorAll('header, [role="banner"]').length,
  nav: document.querySelectorAll('nav, [role="navigation"]').length,
  main: document.querySelectorAll('main, [role="main"]').length,
  footer: document.querySelectorAll('footer, [role="contentinfo"]').length,
})
""")

IMAGES_MISSING_ALT = PageScript("images_missing_alt", """
(_arg) => Array.from(document.querySelectorAll("img"))
  .filter((img) => {
    const rect = img.getBoundingClientRect();
    if (rect.width === 0 || rect.height === 0) return false;
    if (img.getAttribute("role") === "presentation" || img.getAttribute("aria-hidden") === "true") return false;
    const alt = img.getAttribute("alt");
    return alt === null || alt.trim() === "";
  })
  .map((img) => img.getAttribute("src") || "(inline)")
""")

LINK_TEXTS = PageScript("link_texts", """
(_arg) => Array.from(document.querySelectorAll('a, [role="button"]'))
  .filter((el) => {
    const rect = el.getBoundingClientRect();
    return rect.width > 0 && rect.height > 0;
  })
  .map((el) => ((el.textContent || "").trim() || el.getAttribute("aria-label") || "").toLowerCase())
""")

MEDIA_FEATURES = PageScript("media_features", """
(mediaType) => Array.from(document.querySelectorAll(mediaType)).map((el) => ({
  controls: !!el.controls,
  captions: mediaType !== "video" || el.querySelector('track[kind="captions"], track[kind="subtitles"]') !== null,
}))
""")

MOTION_PROFILE = PageScript("motion_profile", """
(_arg) => {
  const autoAdvance = [".carousel[data-autoplay]", ".slider[data-autoplay]", "[autoplay]", "[data-auto-advance]"];
  const parallax = [".parallax", "[data-parallax]", '[style*="parallax"]'];
  const flashing = [".blink", ".flash", ".flicker", '[class*="blink"]', '[class*="flash"]'];
  let aggressive = false;
  let rapid = false;
  for (const el of document.querySelectorAll("*")) {
    const style = window.getComputedStyle(el);
    const animation = parseFloat(style.animationDuration) || 0;
    const transition = parseFloat(style.transitionDuration) || 0;
    if ((animation > 0 && animation < 0.3) || (transition > 0 && transition < 0.3)) aggressive = true;
    if (animation > 0 && animation < 0.2) rapid = true;
  }
  return {
    autoAdvance: autoAdvance.some((s) => document.querySelector(s) !== null),
    parallax: parallax.some((s) => document.querySelector(s) !== null),
    flashingClasses: flashing.some((s) => document.querySelector(s) !== null),
    aggressiveAnimations: aggressive,
    rapidAnimations: rapid,
  };
}
""")

ARIA_LIVE_COUNT = PageScript("aria_live_count", """
(_arg) => document.querySelectorAll("[aria-live]").length
""")

POSITIVE_TABINDEX_ORDER = PageScript("positive_tabindex_order", """
(_arg) => {
  const items = Array.from(
    document.querySelectorAll('a, button, input, textarea, select, [tabindex]:not([tabindex="-1"])')
  ).map((el) => {
    const rect = el.getBoundingClientRect();
    return { top: rect.top, left: rect.left, tabIndex: el.hasAttribute("tabindex") ? parseInt(el.getAttribute("tabindex"), 10) || 0 : 0 };
  });
  items.sort((a, b) => (Math.abs(a.top - b.top) < 10 ? a.left - b.left : a.top - b.top));
  return items.map((item) => item.tabIndex);
}
""")

# --- responsive -----------------------------------------------------------

RESPONSIVE_SNAPSHOT = PageScript("responsive_snapshot", """
({ minTextSize, minTouchTarget }) => {
  const describe = (el) => {
    const id = el.id ? "#" + el.id : "";
    return el.tagName.toLowerCase() + id;
  };
  const smallText = Array.from(document.querySelectorAll("p, h1, h2, h3, h4, h5, h6"))
    .filter((el) => parseFloat(window.getComputedStyle(el).fontSize) < minTextSize);
  const smallTargets = Array.from(document.querySelectorAll("a, button, input, select"))
    .filter((el) => {
      const rect = el.getBoundingClientRect();
      if (rect.width === 0 && rect.height === 0) return false;
      return rect.width < minTouchTarget || rect.height < minTouchTarget;
    })
    .map(describe);
  const main = document.querySelector("main");
  return {
    hasHorizontalScroll: document.body.scrollWidth > document.documentElement.clientWidth,
    smallTextCount: smallText.length,
    smallTouchTargets: smallTargets,
    mainWidth: main ? main.getBoundingClientRect().width : document.body.getBoundingClientRect().width,
  };
}
""")
