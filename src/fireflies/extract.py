# Content extraction — reduce raw HTML to plain text.
# Created: 2026-10-02

import re

_SCRIPT_RE = re.compile(r"<script[^>]*>[\s\S]*?</script>", re.IGNORECASE)
_STYLE_RE = re.compile(r"<style[^>]*>[\s\S]*?</style>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")

# &amp; last so that "&amp;lt;" decodes one level per pass
_ENTITIES = (
    ("&nbsp;", " "),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&amp;", "&"),
)


def _extract_once(html: str) -> str:
    text = _SCRIPT_RE.sub("", html)
    text = _STYLE_RE.sub("", text)
    text = _TAG_RE.sub(" ", text)
    for entity, char in _ENTITIES:
        text = text.replace(entity, char)
    return _WHITESPACE_RE.sub(" ", text).strip()


def extract_text(html: str) -> str:
    """Strip scripts, styles, tags and common entities from *html*.

    Never raises; malformed markup degrades to whatever text remains. The pass
    is repeated until the text stops changing, so ``extract_text`` applied to
    its own output returns it unchanged.
    """
    if not html:
        return ""
    text = _extract_once(html)
    # Every changing pass after the first shortens the text, so this terminates.
    while True:
        again = _extract_once(text)
        if again == text:
            return text
        text = again
