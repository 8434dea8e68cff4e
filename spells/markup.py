import re
import textwrap

import markdown

_converter = markdown.Markdown(extensions=['extra'])
_SINGLE_PARAGRAPH = re.compile(r'^<p>((?:(?!</?p>).)*)</p>$', re.DOTALL)


def markdown_to_html(text: str) -> str:
    """
    Converts Markdown text to HTML. Text that comes out as exactly one paragraph is
    unwrapped, so `span *hi*` stays `<span><em>hi</em></span>`.
    """
    # multiline text keeps its source indentation after the first line
    first, newline, rest = text.partition('\n')
    html = _converter.reset().convert(first + newline + textwrap.dedent(rest))
    match = _SINGLE_PARAGRAPH.match(html)
    return match.group(1) if match else html
