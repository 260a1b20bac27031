"""
Field tag parsing.

Go struct tags are space-separated ``key:"value"`` pairs wrapped in back-ticks,
e.g. ``json:"place_type,omitempty" nullable:"true"``.
"""

from typing import Dict, Optional

from extraction.config import (
    DEFAULT_NAME_TAG_KEY,
    NULLABLE_TAG_KEY,
    OMITEMPTY_OPTION,
    QUOTE_CHARS,
)
from extraction.errors import InvalidTagEntry
from extraction.models import Tag


def remove_quotes(text: str) -> str:
    """Strip one matching pair of enclosing quote characters.

    Text shorter than two characters, or not wrapped in a matching pair of
    ``"``, back-tick or ``'``, is returned unchanged.

    Args:
        text: Literal or tag text.

    Returns:
        The text without its enclosing quotes.
    """
    if len(text) < 2:
        return text
    if text[0] in QUOTE_CHARS and text[-1] == text[0]:
        return text[1:-1]
    return text


def parse_tag(raw: Optional[str], name_key: str = DEFAULT_NAME_TAG_KEY) -> Tag:
    """Parse a raw field tag into a Tag.

    Args:
        raw: Tag text as written in source, with or without back-ticks.
        name_key: Tag key whose first component is the serialized field name.

    Returns:
        The parsed Tag. A missing or empty tag yields an empty Tag.

    Raises:
        InvalidTagEntry: If an entry has no ``key:value`` form.
    """
    if not raw:
        return Tag()

    # `json:"name,omitempty"` -> json:"name,omitempty"
    tag_string = remove_quotes(raw)

    entries: Dict[str, str] = {}
    serialized_name = ""
    omit_if_empty = False
    nullable = False

    for candidate in tag_string.split(" "):
        if not candidate:
            continue
        parts = candidate.split(":", 1)
        if len(parts) != 2:
            raise InvalidTagEntry(f"invalid tag entry {candidate!r} in {raw!r}")

        key = parts[0].strip()
        value = remove_quotes(parts[1].strip())
        entries[key] = value

        if key == NULLABLE_TAG_KEY:
            if value == "true":
                nullable = True
        elif key == name_key:
            options = value.split(",")
            serialized_name = options[0]
            if len(options) > 1 and OMITEMPTY_OPTION in options[1]:
                omit_if_empty = True

    return Tag(
        serialized_name=serialized_name,
        omit_if_empty=omit_if_empty,
        nullable=nullable,
        all_entries=entries,
    )
