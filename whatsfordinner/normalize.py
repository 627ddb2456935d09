# Text clean-up for form input and filter tags


def clean_text(s) -> str:
    if s is None:
        return ""
    return str(s).strip()


def is_blank(s) -> bool:
    return clean_text(s) == ""


def normalize_tag(s: str) -> str:
    """Turn a display label into a Spoonacular tag.

    "Gluten Free" -> "gluten-free". Internal runs of whitespace collapse to a
    single hyphen.
    """
    w = clean_text(s).lower()
    if not w:
        return ""
    return "-".join(w.split())


def join_values(values) -> str:
    """Comma-join non-blank values, preserving order and dropping duplicates."""
    seen = []
    for v in values or []:
        v = clean_text(v)
        if v and v not in seen:
            seen.append(v)
    return ",".join(seen)
