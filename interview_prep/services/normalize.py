import re
from typing import Any

TEXT_KEYS = ("text", "point", "title", "name", "description", "value", "question")


def clean_text(value: Any, *, max_len: int = 2000) -> str:
    if value is None:
        return ""
    if isinstance(value, dict):
        for key in TEXT_KEYS:
            if value.get(key):
                return clean_text(value[key], max_len=max_len)
        return ""
    text = re.sub(r"\s+", " ", str(value)).strip()
    return text[:max_len]


def string_list(value: Any, *, max_items: int = 50) -> list[str]:
    """Coerce a model-produced list (strings or small objects) into unique strings."""
    if value is None:
        return []
    if isinstance(value, (str, dict)):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return []

    out: list[str] = []
    seen = set()
    for item in value:
        text = clean_text(item)
        if not text:
            continue
        key = text.lower()
        if key in seen:
            continue
        seen.add(key)
        out.append(text)
        if len(out) >= max_items:
            break
    return out


def merge_unique(target: list[str], extra: list[str]) -> list[str]:
    combined = list(target)
    seen = {item.lower() for item in combined}
    for item in extra:
        if item.lower() not in seen:
            seen.add(item.lower())
            combined.append(item)
    return combined
