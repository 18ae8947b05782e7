"""Text processing utilities for email bodies."""
import re
from typing import Pattern


class HtmlTextProcessor:
    """Utility class deriving plain-text email bodies from HTML content."""

    # Naive tag matcher, no HTML parsing
    TAG_PATTERN: Pattern = re.compile(r"<[^>]*>")

    @classmethod
    def strip_tags(cls, html: str) -> str:
        """
        Remove every `<...>` tag from the text, leaving content untouched.

        Args:
            html: HTML (or plain) text

        Returns:
            Text without markup tags
        """
        if not html:
            return ""
        return cls.TAG_PATTERN.sub("", html)
