import re
import unicodedata

_WHITESPACE_RE = re.compile(r"\s+")


def clean_text(text: str) -> str:
    """Normalize to NFKC, drop NUL bytes and collapse whitespace runs."""
    if not text:
        return ""
    text = unicodedata.normalize("NFKC", text).replace("\x00", "")
    return _WHITESPACE_RE.sub(" ", text).strip()


def count_words(text: str) -> int:
    return len(text.split()) if text else 0


def slugify(text: str) -> str:
    """Lookup-key form of display text: 'Placement Report 2023' -> 'placement_report_2023'."""
    return _WHITESPACE_RE.sub("_", (text or "").strip().lower())
