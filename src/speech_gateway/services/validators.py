"""
Input Validation for the synthesis endpoint.

Validation happens before any outbound call so bad requests never cost
a vendor round-trip.

Validation Rules:
    - Text: required, not blank
    - Text: at most MAX_WORD_COUNT words

Word Counting:
    Words are the tokens left after splitting on space, tab, carriage
    return and line feed, minus tokens that are blank once trimmed. Other
    whitespace (e.g. non-breaking spaces) does not separate words, and a
    token made only of it is not a word.

        count_words("  hello \t world\r\n")  -> 2
        count_words("a\u00a0b")           -> 1
        count_words("a \u00a0 b")         -> 2

Errors:
    InvalidInputError  "Text cannot be empty"
    TextTooLongError   "Maximum word count is 200, but got N words."
"""
from __future__ import annotations

import re
from typing import Optional

from speech_gateway.core.errors import InvalidInputError, TextTooLongError

# Maximum number of words accepted per request
MAX_WORD_COUNT = 200

_WORD_SEPARATORS = re.compile(r"[ \t\r\n]+")


def count_words(text: Optional[str]) -> int:
    """
    Count words separated by space, tab, CR or LF.

    Tokens made only of other whitespace (NBSP, form feed, ...) are not words.
    """
    if not text:
        return 0
    return sum(1 for token in _WORD_SEPARATORS.split(text) if token.strip())


def validate_text(text: Optional[str], max_words: int = MAX_WORD_COUNT) -> int:
    """
    Validate text to synthesize.

    Args:
        text: Input text
        max_words: Maximum allowed word count

    Returns:
        Word count of the text

    Raises:
        InvalidInputError: Text is empty or whitespace only
        TextTooLongError: Text has more than max_words words
    """
    if not text or not text.strip():
        raise InvalidInputError("Text cannot be empty")

    word_count = count_words(text)
    if word_count > max_words:
        raise TextTooLongError(
            f"Maximum word count is {max_words}, but got {word_count} words.",
            details={"word_count": word_count, "max_words": max_words},
        )

    return word_count
