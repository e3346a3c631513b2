"""
Hierarchical domain sets for URL allow/block policy.

Domains are stored as top-level label -> second-level label -> sub-labels so
a lookup is two dictionary probes and a set membership test instead of a
scan over every configured domain.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Set, Union
from urllib.parse import ParseResult, SplitResult, urlsplit

from autoshadow.core.exceptions import FormatError

UrlLike = Union[str, SplitResult, ParseResult]


@dataclass(frozen=True)
class DomainParts:
    """A hostname split into its (optional) sub-label, second-level and top-level labels."""

    sub: Optional[str]
    second: str
    top: str

    @classmethod
    def parse(cls, domain: str) -> 'DomainParts':
        """
        Split a domain into labels.

        Args:
            domain: Hostname such as 'github.com' or 'docs.example.org'

        Returns:
            DomainParts for the hostname

        Raises:
            FormatError: If the domain does not have two or three labels
        """
        labels = domain.lower().split('.')
        if len(labels) not in (2, 3) or not all(labels):
            raise FormatError(f"Unrecognized domain format: {domain!r}", domain=domain)

        sub = labels[0] if len(labels) == 3 else None
        return cls(sub=sub, second=labels[-2], top=labels[-1])


class DomainMatcher:
    """
    Set of domains supporting membership tests for URLs.

    A domain given without a sub-label ('example.com') matches every host
    under it and stays that way, even if sub-labelled entries for the same
    domain are added later. A domain given with a sub-label
    ('docs.example.com') matches only that exact sub-label.
    """

    def __init__(self) -> None:
        # None means "every sub-label"
        self._domains: Dict[str, Dict[str, Optional[Set[str]]]] = {}

    @classmethod
    def build(cls, domains: Iterable[str]) -> 'DomainMatcher':
        """
        Build a matcher from domain strings.

        Raises:
            FormatError: On the first malformed domain
        """
        matcher = cls()
        for domain in domains:
            matcher.add(domain)
        return matcher

    def add(self, domain: str) -> None:
        """Insert a single domain, widening an existing entry if needed."""
        parts = DomainParts.parse(domain)
        seconds = self._domains.setdefault(parts.top, {})

        if parts.sub is None:
            seconds[parts.second] = None
            return

        if parts.second not in seconds:
            seconds[parts.second] = set()
        subs = seconds[parts.second]
        if subs is not None:
            subs.add(parts.sub)

    def contains(self, url: UrlLike) -> bool:
        """
        Check whether a URL's host is in the set.

        Malformed URLs, URLs without a host, and hosts that are not two or
        three labels long never match.
        """
        hostname = _hostname(url)
        if not hostname:
            return False

        try:
            parts = DomainParts.parse(hostname)
        except FormatError:
            return False

        subs_by_second = self._domains.get(parts.top)
        if subs_by_second is None or parts.second not in subs_by_second:
            return False

        subs = subs_by_second[parts.second]
        if subs is None:
            return True
        return parts.sub is not None and parts.sub in subs

    def __contains__(self, url: UrlLike) -> bool:
        return self.contains(url)

    def __len__(self) -> int:
        return sum(len(seconds) for seconds in self._domains.values())

    def __bool__(self) -> bool:
        return bool(self._domains)

    def __repr__(self) -> str:
        entries = []
        for top, seconds in sorted(self._domains.items()):
            for second, subs in sorted(seconds.items()):
                if subs is None:
                    entries.append(f"*.{second}.{top}")
                else:
                    entries.extend(f"{sub}.{second}.{top}" for sub in sorted(subs))
        return f"DomainMatcher({entries})"


def _hostname(url: UrlLike) -> Optional[str]:
    if isinstance(url, str):
        try:
            url = urlsplit(url)
        except ValueError:
            return None

    try:
        return url.hostname
    except ValueError:
        # Raised for malformed ports / IPv6 literals
        return None
