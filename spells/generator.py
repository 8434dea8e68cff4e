import re
from typing import Dict, List, Optional

from .elements import Element, unquote
from .markup import markdown_to_html

# Text longer than this gets its own lines in the output
LONG_TEXT_THRESHOLD = 70

_VARIABLE = re.compile(r'@\{([a-zA-Z0-9_\-@]*?)\}')


def replace_variables(text: str, variables: Dict[str, str]) -> str:
    """Replaces every `@{name}` with the value of `name`. Unknown names are left alone."""
    def lookup(match: re.Match) -> str:
        name = match.group(1)
        if name not in variables:
            return match.group(0)
        return unquote(variables[name])

    return _VARIABLE.sub(lookup, text)


def _open_tag(el: Element, variables: Dict[str, str]) -> str:
    out = '<' + el.tag_name
    for name, value in el.attributes.items():
        out += ' ' + name
        if value:
            out += '=' + replace_variables(value, variables)
    if el.id:
        out += f' id="{el.id}"'
    if el.classes:
        out += f' class="{" ".join(el.classes)}"'
    return out + '>'


def generate(elements: List[Element], variables: Optional[Dict[str, str]] = None) -> str:
    """
    Converts elements to HTML. Children are indented by one tab per level and can use
    the attributes of every ancestor as `@{variables}`, the closest one winning.
    """
    variables = variables or {}
    parts: List[str] = []
    for el in elements:
        out = _open_tag(el, variables)

        if el.inner_text:
            text = replace_variables(el.inner_text, variables)
            if el.not_markdown:
                out += text
            elif len(text) > LONG_TEXT_THRESHOLD:
                out += '\n\t' + markdown_to_html(text) + '\n'
            else:
                out += markdown_to_html(text)

        if el.children:
            inner = generate(el.children, {**variables, **el.attributes})
            out += '\n\t' + inner.replace('\n', '\n\t') + '\n'

        if el.inner_text or el.children or not el.single_tag:
            out += f'</{el.tag_name}>'
        parts.append(out)
    return '\n'.join(parts)
