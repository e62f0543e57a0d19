"""Text processing utilities for standards content."""

import re
from typing import List, Optional


ELLIPSIS = "..."
HIGHLIGHT_OPEN = "<mark>"
HIGHLIGHT_CLOSE = "</mark>"


class TextProcessor:
    """Text processing utilities for section titles and bodies."""

    def __init__(
        self,
        highlight_open: str = HIGHLIGHT_OPEN,
        highlight_close: str = HIGHLIGHT_CLOSE,
        lead_chars: int = 50,
    ):
        """
        Initialize text processor.

        Args:
            highlight_open: Marker inserted before every highlighted match
            highlight_close: Marker inserted after every highlighted match
            lead_chars: Characters of context kept before the first match
        """
        self.highlight_open = highlight_open
        self.highlight_close = highlight_close
        self.lead_chars = lead_chars

        self.keyword_split_pattern = re.compile(r'[^a-z0-9]+')
        self.sentence_pattern = re.compile(r'[^.!?]+[.!?]+')
        self._marker_pattern = re.compile(
            re.escape(highlight_open) + '|' + re.escape(highlight_close)
        )

    def normalize(self, text: Optional[str]) -> str:
        """Lowercase text, treating None as empty."""
        if not text:
            return ""
        return text.lower()

    def split_words(self, text: Optional[str]) -> List[str]:
        """Split normalized text into whitespace-delimited words."""
        return self.normalize(text).split()

    def extract_keywords(self, text: Optional[str]) -> List[str]:
        """
        Extract lowercase alphanumeric keywords from text.

        Used to turn an activity name such as "Scope & WBS" into
        ["scope", "wbs"].
        """
        return [word for word in self.keyword_split_pattern.split(self.normalize(text)) if word]

    def build_snippet(self, content: Optional[str], query: Optional[str], window: int = 200) -> str:
        """
        Build a highlighted snippet around the first match of query.

        Args:
            content: Full section text
            query: Literal query string (matched case-insensitively)
            window: Maximum number of content characters in the snippet

        Returns:
            Snippet with ellipses marking truncation and every query
            occurrence wrapped in highlight markers
        """
        content = content or ""
        query = query or ""

        # Offsets come from the original text; lower() may change its length.
        match = re.search(re.escape(query), content, re.IGNORECASE) if query else None

        if match:
            start = max(0, match.start() - self.lead_chars)
            end = min(len(content), start + window)
            snippet = content[start:end]
            if start > 0:
                snippet = ELLIPSIS + snippet
            if end < len(content):
                snippet = snippet + ELLIPSIS
        else:
            snippet = content[:window]
            if len(content) > window:
                snippet += ELLIPSIS

        return self.highlight(snippet, query)

    def highlight(self, text: str, query: Optional[str]) -> str:
        """Wrap every case-insensitive occurrence of query in highlight markers."""
        if not text or not query:
            return text
        pattern = re.compile(re.escape(query), re.IGNORECASE)
        return pattern.sub(
            lambda m: f"{self.highlight_open}{m.group(0)}{self.highlight_close}", text
        )

    def strip_highlights(self, text: str) -> str:
        """Remove highlight markers, leaving the visible text."""
        return self._marker_pattern.sub("", text)

    def count_words(self, text: Optional[str]) -> int:
        return len((text or "").split())

    def count_sentences(self, text: Optional[str]) -> int:
        if not text or not text.strip():
            return 0
        sentences = self.sentence_pattern.findall(text)
        # Trailing text without terminal punctuation still counts as a sentence
        tail = self.sentence_pattern.sub("", text).strip()
        return len(sentences) + (1 if tail else 0)

    def truncate(self, text: Optional[str], max_chars: int) -> str:
        text = text or ""
        return text if len(text) <= max_chars else text[:max_chars]
