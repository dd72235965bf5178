from typing import Optional

# "&" must go first, otherwise the entities added below get escaped twice.
_XML_ENTITIES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
)


def escape(text: Optional[str]) -> str:
    """Make text safe for element content and attribute values."""
    if not text:
        return ""
    for raw, entity in _XML_ENTITIES:
        text = text.replace(raw, entity)
    return text
