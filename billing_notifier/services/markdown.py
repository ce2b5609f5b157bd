"""
Telegram MarkdownV2 escaping.

Applied once to the fully assembled message; the ```text fence is built
from backticks and letters only, so it passes through unchanged.
"""

# Characters with special meaning in MarkdownV2 that appear in reports
MARKDOWN_SPECIAL_CHARS = ("-", ".", "!", "(", ")", "[", "]")

_ESCAPE_TABLE = str.maketrans({char: f"\\{char}" for char in MARKDOWN_SPECIAL_CHARS})


def escape_markdown(text: str) -> str:
    """Escape MarkdownV2 special characters with a leading backslash.

    Args:
        text: Complete message body

    Returns:
        Escaped message
    """
    return text.translate(_ESCAPE_TABLE)
