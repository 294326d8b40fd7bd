"""
Tag-location strategies for tolerant extraction.

Each strategy knows one way the service has been seen to spell an element:
bare, under a conventional prefix, under any prefix, or as the generic
JAX-WS <return> element. The extractor walks them in priority order, so a
new server quirk is one more strategy, not a rewrite of the extractor.

Closing tags are matched with or without a prefix regardless of how the
opening tag was spelled: prefix-inconsistent documents are the reason
this module exists.
"""

import re
from functools import lru_cache
from typing import Iterable, Optional, Protocol, Sequence


class TagStrategy(Protocol):
    """Locate the inner content of the first element named `tag`."""

    name: str

    def find(self, content: str, tag: str) -> Optional[str]:
        """
        Return the inner text of the first matching element, or None.

        Args:
            content: Raw (possibly malformed) XML text
            tag: Local element name
        """
        ...


@lru_cache(maxsize=512)
def _element_pattern(opening_prefix: str, tag: str) -> re.Pattern[str]:
    name = re.escape(tag)
    return re.compile(
        rf"<{opening_prefix}{name}(?:\s[^>]*)?>(.*?)</(?:[\w.-]+:)?{name}\s*>",
        re.DOTALL,
    )


class ExactTagStrategy:
    """<tag>...</tag> with no prefix on the opening tag."""

    name = "exact"

    def find(self, content: str, tag: str) -> Optional[str]:
        match = _element_pattern("", tag).search(content)
        return match.group(1) if match else None


class PrefixedTagStrategy:
    """<ns2:tag>...</ns2:tag> for a fixed list of conventional prefixes."""

    name = "prefixed"

    def __init__(self, prefixes: Sequence[str] = ("ns2", "tns", "ns1")):
        self.prefixes = tuple(prefixes)

    def find(self, content: str, tag: str) -> Optional[str]:
        for prefix in self.prefixes:
            match = _element_pattern(re.escape(prefix) + ":", tag).search(content)
            if match:
                return match.group(1)
        return None


class AnyPrefixTagStrategy:
    """<whatever:tag>...</whatever:tag>."""

    name = "any_prefix"

    def find(self, content: str, tag: str) -> Optional[str]:
        match = _element_pattern(r"[\w.-]+:", tag).search(content)
        return match.group(1) if match else None


class GenericReturnStrategy:
    """
    Fallback: the generic JAX-WS <return> element, whatever `tag` was asked for.

    Only meaningful when looking for a result container.
    """

    name = "generic_return"

    def find(self, content: str, tag: str) -> Optional[str]:
        match = _element_pattern(r"(?:[\w.-]+:)?", "return").search(content)
        return match.group(1) if match else None


DEFAULT_STRATEGIES: tuple[TagStrategy, ...] = (
    ExactTagStrategy(),
    PrefixedTagStrategy(),
    AnyPrefixTagStrategy(),
)

CONTAINER_FALLBACK_STRATEGIES: tuple[TagStrategy, ...] = (GenericReturnStrategy(),)


def find_first(
    strategies: Iterable[TagStrategy], content: str, tags: Sequence[str]
) -> Optional[str]:
    """
    Try each tag name in order, each with every strategy in priority order.

    Returns:
        Inner content of the first match, or None
    """
    strategies = tuple(strategies)
    for tag in tags:
        for strategy in strategies:
            found = strategy.find(content, tag)
            if found is not None:
                return found
    return None
