"""
Custom Pygments lexer for aqaprez syntax highlighting

Provides syntax highlighting for deck markup when a slide shows deck source
itself (a code block tagged ```aqaprez).

Token types:
- Generic.Heading: Header text (after # .. #####)
- Keyword.Declaration: Slide dividers (---)
- Keyword: List markers (- and 1.)
- Name.Attribute: Code block parameter keys (font_size, ...)
- Name.Label: Code fence language
- String: Image alt text and code block contents
- Comment.Single: // comments
"""

import re

from pygments.lexer import RegexLexer, bygroups
from pygments.token import (
    Text,
    Punctuation,
    Name,
    String,
    Keyword,
    Literal,
    Comment,
    Generic,
    Number,
)


class AqaprezLexer(RegexLexer):
    """
    Lexer for aqaprez deck markup

    Line-oriented: most constructs are recognized at the start of a line.

    Example:
        # Title       → Punctuation, Generic.Heading
        ---![](a.png) → Keyword.Declaration, image tokens
        - item        → Keyword, Text
    """

    name = 'Aqaprez'
    aliases = ['aqaprez', 'prez']
    filenames = ['*.aqaprez', '*.prez']

    flags = re.MULTILINE

    tokens = {
        'root': [
            # Headers
            (r'^(#{1,5})([ \t]+)(.*)$', bygroups(Punctuation, Text, Generic.Heading)),

            # Slide divider (may be followed by a background image)
            (r'^---', Keyword.Declaration),

            # Comments
            (r'^//.*$', Comment.Single),

            # List markers
            (r'^(-)([ \t]+)', bygroups(Keyword, Text)),
            (r'^(\d+\.?)([ \t]+)', bygroups(Number, Text)),

            # Code block parameter lines
            (r'^(\|)([ \t]+)(font_size|font_style|block_terminator)(:)([ \t]+)(.*)$',
             bygroups(Punctuation, Text, Name.Attribute, Punctuation, Text, Literal.String)),

            # Code fence with language
            (r'^(```)(.*)$', bygroups(Punctuation, Name.Label), 'code'),

            # Images and their parameter block
            (r'(!\[)([^\]\n]*)(\]\()([^)\n]+)(\))',
             bygroups(Punctuation, String, Punctuation, Name.Builtin, Punctuation)),
            (r'\{[^}\n]*\}', Name.Decorator),

            # Everything else is text
            (r'[^\n!{]+', Text),
            (r'\n', Text.Whitespace),
            (r'.', Text),
        ],

        'code': [
            # Closing fence (with or without a custom terminator tag)
            (r'^```.*$', Punctuation, '#pop'),
            (r'.*\n', String),
            (r'.+', String),
        ],
    }


def get_lexer() -> AqaprezLexer:
    """
    Get the AqaprezLexer instance

    Returns:
        AqaprezLexer instance ready for use with Pygments
    """
    return AqaprezLexer()
