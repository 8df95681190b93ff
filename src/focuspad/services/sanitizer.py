"""Strip transient presentation markup from editor content before it is saved."""

import re

# Search-match highlighting wraps plain text only
SEARCH_HIGHLIGHT_RE = re.compile(
    r'<mark class="search-highlight[^>]*>([^<]*)</mark>', re.IGNORECASE
)
FOCUSED_BLOCK_RE = re.compile(r'class="focused-block"')


def strip_transient_markup(content: str) -> str:
    """Remove search highlights and focus-mode dimming from *content*.

    Highlight wrappers are replaced by the text they wrap; the focus class
    attribute is dropped. Content without either is returned unchanged, and
    the transform is idempotent.
    """
    content = SEARCH_HIGHLIGHT_RE.sub(r"\1", content)
    return FOCUSED_BLOCK_RE.sub("", content)
