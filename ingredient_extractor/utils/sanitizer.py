from dataclasses import dataclass, field
from types import MappingProxyType
from typing import FrozenSet, Mapping, Tuple

from bleach.sanitizer import Cleaner

from ingredient_extractor.utils.scraping_utils import strip_non_content

UGC_TAGS = frozenset([
    "a", "abbr", "acronym", "article", "aside", "b", "bdi", "bdo", "blockquote", "br",
    "caption", "cite", "code", "col", "colgroup", "dd", "del", "details", "dfn", "div",
    "dl", "dt", "em", "figcaption", "figure", "footer", "h1", "h2", "h3", "h4", "h5",
    "h6", "header", "hgroup", "hr", "i", "img", "ins", "kbd", "li", "main", "mark",
    "nav", "ol", "p", "pre", "q", "rp", "rt", "ruby", "s", "samp", "section", "small",
    "span", "strike", "strong", "sub", "summary", "sup", "table", "tbody", "td",
    "tfoot", "th", "thead", "time", "tr", "tt", "u", "ul", "var", "wbr",
])

UGC_ATTRIBUTES = MappingProxyType({
    "*": ("title", "dir", "lang"),
    "a": ("href", "hreflang", "name"),
    "blockquote": ("cite",),
    "q": ("cite",),
    "del": ("cite", "datetime"),
    "ins": ("cite", "datetime"),
    "img": ("src", "alt", "width", "height"),
    "ol": ("start", "reversed", "type"),
    "ul": ("type",),
    "li": ("value",),
    "time": ("datetime",),
    "td": ("colspan", "rowspan", "headers", "abbr"),
    "th": ("colspan", "rowspan", "headers", "abbr", "scope"),
    "col": ("span",),
    "colgroup": ("span",),
})

UGC_PROTOCOLS = frozenset(["http", "https", "mailto"])


@dataclass(frozen=True)
class HtmlSanitizer:
    """Allow-list policy for user generated HTML.

    Built once and shared between requests. A bleach Cleaner keeps parser
    state, so a fresh one is created for every call.
    """

    tags: FrozenSet[str] = UGC_TAGS
    attributes: Mapping[str, Tuple[str, ...]] = field(default_factory=lambda: UGC_ATTRIBUTES)
    protocols: FrozenSet[str] = UGC_PROTOCOLS

    def __post_init__(self):
        # Shared by every request, so nothing reachable from the policy may be mutable.
        object.__setattr__(self, "tags", frozenset(self.tags))
        object.__setattr__(self, "protocols", frozenset(self.protocols))
        object.__setattr__(
            self, "attributes", MappingProxyType({tag: tuple(names) for tag, names in self.attributes.items()})
        )

    def _cleaner(self) -> Cleaner:
        return Cleaner(
            tags=self.tags,
            attributes={tag: list(names) for tag, names in self.attributes.items()},
            protocols=self.protocols,
            strip=True,
            strip_comments=True,
        )

    def sanitize(self, html: str) -> str:
        return self._cleaner().clean(strip_non_content(html))


def ugc_policy() -> HtmlSanitizer:
    return HtmlSanitizer()
