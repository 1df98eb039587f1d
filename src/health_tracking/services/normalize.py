from __future__ import annotations

import re


def normalize_key(value: str | None) -> str:
    if not value:
        return ""
    cleaned = value.replace("\ufeff", "").replace("\u00a0", " ").strip()
    cleaned = re.sub(r"\s+", " ", cleaned)
    return cleaned.casefold()


def normalize_words(value: str | None) -> str:
    """Casefold and turn separators ("-", "_", "/") into single spaces."""
    cleaned = normalize_key(value)
    cleaned = re.sub(r"[-_/|,;]+", " ", cleaned)
    return re.sub(r"\s+", " ", cleaned).strip()
