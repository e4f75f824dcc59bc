"""Cheap test of whether a document is worth a full extraction.

Scores paragraph-like nodes by text length without running the extractor,
so no article is built.
"""

import math
import re

from lxml.html import HtmlElement

MIN_CONTENT_LENGTH = 140
MIN_SCORE = 20.0

UNLIKELY_CANDIDATES = re.compile(
    r"-ad-|ai2html|banner|breadcrumbs|combx|comment|community|cover-wrap|disqus|extra|footer|gdpr|header|"
    r"legends|menu|related|remark|replies|rss|shoutbox|sidebar|skyscraper|social|sponsor|supplemental|"
    r"ad-break|agegate|pagination|pager|popup|yom-remote",
    re.IGNORECASE,
)
MAYBE_CANDIDATE = re.compile(r"and|article|body|column|content|main|shadow", re.IGNORECASE)
DISPLAY_NONE = re.compile(r"display\s*:\s*none", re.IGNORECASE)


def is_node_visible(node: HtmlElement) -> bool:
    style = node.get("style") or ""
    if DISPLAY_NONE.search(style):
        return False
    if node.get("hidden") is not None:
        return False
    if node.get("aria-hidden") == "true" and "fallback-image" not in (node.get("class") or ""):
        return False
    return True


def _candidate_nodes(tree: HtmlElement) -> list:
    nodes = tree.xpath("//p | //pre | //article")
    seen = {id(node) for node in nodes}
    for br in tree.xpath("//div/br"):
        parent = br.getparent()
        if id(parent) not in seen:
            seen.add(id(parent))
            nodes.append(parent)
    return nodes


def _inside_list_item(node: HtmlElement) -> bool:
    return node.tag == "p" and any(ancestor.tag == "li" for ancestor in node.iterancestors())


def is_probably_readerable(
    tree: HtmlElement,
    min_content_length: int = MIN_CONTENT_LENGTH,
    min_score: float = MIN_SCORE,
) -> bool:
    """
    Decide whether a document probably holds readable content.

    Args:
        tree: Parsed HTML document
        min_content_length: Characters a node needs before it counts
        min_score: Score above which the document is considered readable

    Returns:
        True as soon as the accumulated score exceeds ``min_score``
    """
    score = 0.0
    for node in _candidate_nodes(tree):
        if not is_node_visible(node):
            continue

        match_string = f"{node.get('class') or ''} {node.get('id') or ''}"
        if UNLIKELY_CANDIDATES.search(match_string) and not MAYBE_CANDIDATE.search(match_string):
            continue

        if _inside_list_item(node):
            continue

        text_length = len(node.text_content().strip())
        if text_length < min_content_length:
            continue

        score += math.sqrt(text_length - min_content_length)
        if score > min_score:
            return True

    return False
