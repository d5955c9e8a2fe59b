"""
Link Extractor
==============
Finds URLs in untrusted issue/comment text and keeps only trusted ones.

Detection uses linkify-it so bare URLs in prose are found, not just markdown
links. Only links with an explicit scheme count; schemaless "fuzzy" links and
e-mail addresses are not downloadable results.

Acceptance is a literal, case-sensitive prefix match against the allowlist.
No normalisation of trailing slashes or query strings is applied.
"""
import logging
from dataclasses import dataclass, field
from typing import Iterable, List

from linkify_it import LinkifyIt

logger = logging.getLogger(__name__)

_LINKIFY_OPTIONS = {"fuzzy_link": False, "fuzzy_email": False, "fuzzy_ip": False}


@dataclass
class LinkExtraction:
    accepted: List[str] = field(default_factory=list)
    rejected: List[str] = field(default_factory=list)


def is_url_allowed(url: str, allowlist: Iterable[str]) -> bool:
    return any(url.startswith(prefix) for prefix in allowlist)


def find_links(text: str) -> List[str]:
    """Return every schema'd URL in text, in order of appearance."""
    matches = LinkifyIt(options=_LINKIFY_OPTIONS).match(text) or []
    return [m.url for m in matches if not m.url.startswith("mailto:")]


def extract_links(text: str, allowlist: Iterable[str]) -> LinkExtraction:
    """
    Split the links in text into accepted and rejected URLs.

    Duplicates are kept: deduplication happens later, by content hash.

    Parameters
    ----------
    text : str
        Issue or comment body.
    allowlist : Iterable[str]
        Trusted URL prefixes.

    Returns
    -------
    LinkExtraction
        Accepted and rejected URLs, each in order of first appearance.
    """
    prefixes = tuple(allowlist)
    extraction = LinkExtraction()

    for url in find_links(text):
        if is_url_allowed(url, prefixes):
            logger.info("URL found: %s", url)
            extraction.accepted.append(url)
        else:
            logger.warning("URL ignored due to not having a trusted prefix: %s", url)
            extraction.rejected.append(url)

    return extraction
