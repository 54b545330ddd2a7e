"""
HeuristicSuggester: rule-based suggestion provider with no model behind it.
Always available; used when nothing smarter is configured.
"""

from typing import Optional

from .base import SuggestionProvider

WEAK_NAMES = {"tmp", "data", "foo", "bar"}

# Checked in order; containers first so "Dict[str, int]" maps to a container name
TYPE_NAME_HINTS = [
    (("dict", "mapping"), "lookup"),
    (("list", "sequence", "tuple"), "values"),
    (("set",), "items"),
    (("bool",), "flag"),
    (("bytes",), "payload"),
    (("str",), "text"),
    (("int",), "count"),
    (("float",), "value"),
]


def is_weak_name(name: str) -> bool:
    return name.lower() in WEAK_NAMES or len(name) <= 2


def sanitize_identifier(text: str) -> str:
    """Lowercase, collapse non-alphanumerics into single underscores."""
    out = []
    for ch in text.lower():
        if ch.isalnum() and ch.isascii():
            out.append(ch)
        elif out and out[-1] != "_":
            out.append("_")
    name = "".join(out).rstrip("_")
    if not name or name[0].isdigit():
        name = "_" + name
    return name


class HeuristicSuggester(SuggestionProvider):
    """Suggest names from type hints and docstring stubs from signatures."""

    def suggest_identifier(self, current: str, type_hint: str = "", usage_hint: str = "") -> Optional[str]:
        if not is_weak_name(current):
            return None

        hint = type_hint.lower()
        for needles, suggestion in TYPE_NAME_HINTS:
            if any(needle in hint for needle in needles):
                return suggestion if suggestion != current else None

        # Fallback: combine usage/type into a valid identifier
        base = f"{usage_hint.lower()}_{hint}" if usage_hint else hint
        suggestion = sanitize_identifier(base) if base else "value"
        if suggestion.strip("_") == "":
            suggestion = "value"
        return suggestion if suggestion != current else None

    def doc_for_signature(self, signature: str) -> Optional[str]:
        return f"TODO: describe {signature}."
