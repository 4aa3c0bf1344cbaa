"""
Text normalization helpers.

Whitespace collapsing, boilerplate stripping, content hashing and the
word-count metadata written for captures.

Dependencies: hashlib, unicodedata (stdlib)
System role: Shared text processing for the ingestion pipeline
"""

import hashlib
import math
import re
import unicodedata

WORDS_PER_MINUTE = 200

_WHITESPACE = re.compile(r"\s+")
_SCRIPT_BLOCK = re.compile(r"<script\b[^>]*>.*?</script\s*>", re.IGNORECASE | re.DOTALL)
_STYLE_BLOCK = re.compile(r"<style\b[^>]*>.*?</style\s*>", re.IGNORECASE | re.DOTALL)
_TAG = re.compile(r"<[^>]+>")
_NON_SLUG = re.compile(r"[^a-z0-9]+")


def collapse_whitespace(text: str) -> str:
    """Replace whitespace runs with a single space and trim."""
    return _WHITESPACE.sub(" ", text or "").strip()


def remove_boilerplate(html: str) -> str:
    """Strip script/style blocks and tags, then collapse whitespace."""
    text = _SCRIPT_BLOCK.sub("", html or "")
    text = _STYLE_BLOCK.sub("", text)
    text = _TAG.sub(" ", text)
    return collapse_whitespace(text)


def content_hash(text: str) -> str:
    """
    sha256 fingerprint of normalized text.

    Whitespace is collapsed and the text NFKC-normalized so re-captures that
    differ only in formatting hash identically.

    Returns:
        str: Hex digest, or "" for empty input
    """
    if not text:
        return ""
    normalized = unicodedata.normalize("NFKC", collapse_whitespace(text))
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()


def count_words(text: str) -> int:
    return len(text.split()) if text else 0


def reading_time_minutes(text: str) -> int:
    """Estimated reading time, at least one minute for non-empty text."""
    words = count_words(text)
    return max(1, math.ceil(words / WORDS_PER_MINUTE)) if words else 0


def slugify(title: str, max_length: int = 80) -> str:
    """Lower-case, hyphen-separated ASCII slug."""
    ascii_title = unicodedata.normalize("NFKD", title).encode("ascii", "ignore").decode("ascii")
    slug = _NON_SLUG.sub("-", ascii_title.lower()).strip("-")
    return slug[:max_length].rstrip("-") or "untitled"
