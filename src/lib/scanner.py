"""
Delimiter scanner

The one primitive every node parser builds on: find the first occurrence of a
literal delimiter and split there, consuming the delimiter. If the delimiter
never occurs, the rest of the input is the captured span. This never fails.
"""

from ..models.parser import DelimiterMatch, DelimiterSplit


def delimiter_find(source: str, delimiter: str, start: int = 0) -> DelimiterMatch:
    """
    Scan forward from start for delimiter

    Args:
        source: Full source text
        delimiter: Literal, non-empty delimiter string
        start: Position to begin scanning from

    Returns:
        DelimiterMatch with the span before the delimiter and the cursor
        position just past it (len(source) if the delimiter is absent)
    """
    index = source.find(delimiter, start)
    if index < 0:
        return DelimiterMatch(span=source[start:], end=len(source), found=False)
    return DelimiterMatch(span=source[start:index], end=index + len(delimiter), found=True)


def delimiter_split(text: str, delimiter: str) -> DelimiterSplit:
    """
    Split text at the first occurrence of delimiter

    Example:
        >>> delimiter_split("# Title\\n\\nBody", "\\n\\n")
        DelimiterSplit(span='# Title', tail='Body', found=True)
        >>> delimiter_split("no blank line", "\\n\\n")
        DelimiterSplit(span='no blank line', tail='', found=False)
    """
    match = delimiter_find(text, delimiter)
    return DelimiterSplit(span=match.span, tail=text[match.end:], found=match.found)
