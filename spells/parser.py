import bisect
import logging
import re
import string
from typing import Dict, List, Optional, Tuple

from .elements import Element
from .errors import SpellsSyntaxError
from .options import CompileOptions
from .paths import go_up_one_level, normalize, relative_from
from .special_tags import NO_MARKDOWN_TAGS, SINGLE_TAGS, is_link_attribute

logger = logging.getLogger(__name__)

# Characters that can be used inside a tag name
NAME_CHARS = frozenset(string.ascii_letters + string.digits + '_-@/')
OPENERS = '([{'
CLOSERS = ')]}'
QUOTES = '"\''
DEFAULT_INDENT_SIZE = 4

_LEADING_WHITESPACE = re.compile(r'^[ \t]*')
# URLs with a scheme, absolute paths and fragments are never remapped
_ABSOLUTE_LINK = re.compile(r'^(?:[a-zA-Z][a-zA-Z0-9+.-]*:|/|#)')


def detect_indent_size(lines: List[str]) -> int:
    """Number of spaces making up one level, taken from the first space-indented line."""
    for line in lines:
        leading = _LEADING_WHITESPACE.match(line).group(0)
        if leading.startswith(' ') and line.strip():
            return len(leading) - len(leading.lstrip(' '))
    return DEFAULT_INDENT_SIZE


def normalize_indentation(source: str) -> str:
    """Rewrites leading spaces into tabs so that every indent is a tab count."""
    lines = source.replace('\r\n', '\n').split('\n')
    size = detect_indent_size(lines)
    out: List[str] = []
    for number, line in enumerate(lines, start=1):
        leading = _LEADING_WHITESPACE.match(line).group(0)
        if ' ' not in leading:
            out.append(line)
            continue
        spaces = leading.count(' ')
        if spaces % size and line.strip():
            logger.warning("Line %d: %d spaces is not a multiple of the indent size (%d).",
                           number, spaces, size)
        out.append('\t' * (leading.count('\t') + spaces // size) + line[len(leading):])
    return '\n'.join(out)


def split_modifiers(modifiers: str) -> List[str]:
    """
    Splits the part right after a tag name into classes, ids and attribute groups:
    `#main.big(title="a.b")` -> `['#main', '.big', '(title="a.b")']`.
    """
    tokens: List[str] = []
    current = ''
    depth = 0
    quote = None
    escaped = False
    for ch in modifiers:
        if quote:
            current += ch
            if escaped:
                escaped = False
            elif ch == '\\':
                escaped = True
            elif ch == quote:
                quote = None
            continue
        if ch in QUOTES:
            quote = ch
        elif ch in '.#(' and depth == 0 and current:
            tokens.append(current)
            current = ''
        if ch == '(':
            depth += 1
        elif ch == ')' and depth:
            depth -= 1
        current += ch
    if current:
        tokens.append(current)
    return tokens


def split_attribute_pairs(group: str) -> List[str]:
    """Splits `a=1, b="x y" c` into `['a=1', 'b="x y"', 'c']`."""
    pairs: List[str] = []
    current = ''
    quote = None
    for ch in group:
        if quote:
            current += ch
            if ch == quote:
                quote = None
            continue
        if ch in QUOTES:
            quote = ch
        elif ch in ', \t\n':
            if current:
                pairs.append(current)
                current = ''
            continue
        current += ch
    if current:
        pairs.append(current)
    return pairs


class Parser:
    """
    Turns normalized source text into a tree of Elements. One instance handles one
    file; `parse` calls itself for every indentation level.
    """

    def __init__(self, code: str, options: CompileOptions):
        self.code = code
        self.options = options
        self._line_starts = [0] + [m.end() for m in re.finditer('\n', code)]

    def _position(self, offset: int) -> Tuple[int, int]:
        line = bisect.bisect_right(self._line_starts, offset)
        return line, offset - self._line_starts[line - 1] + 1

    def _fatal_error(self, message: str, offset: int):
        line, column = self._position(offset)
        raise SpellsSyntaxError(message, self.options.file_path, f"{line}:{column}")

    def parse(self, indent: int, start: int, variables: Dict[str, str]) -> Tuple[List[Element], int]:
        """
        Parses the elements at `indent` starting at `start`. Returns them together with
        the offset where the caller should carry on: the start of the first line that
        is indented less, or the end of the code.
        """
        code = self.code
        elements: List[Element] = []
        tag_indent = 0
        tag_name = ''
        i = start
        while i < len(code):
            c = code[i]
            if c in NAME_CHARS:
                tag_name += c
                i += 1
                continue

            if not tag_name:
                if c == '\t':
                    tag_indent += 1
                elif c == '\n':
                    tag_indent = 0
                i += 1
                continue

            tag_start = i - len(tag_name)
            if tag_name.startswith('//'):
                # comment, skip the rest of the line
                i = code.find('\n', i)
            elif tag_indent < indent:
                # belongs to a parent, let it handle this line
                return elements, code.rfind('\n', 0, tag_start) + 1
            else:
                element, i = self._parse_element(tag_name, tag_start, indent, i, variables)
                elements.append(element)
            tag_name = ''
            tag_indent = 0

        return elements, len(code)

    def _parse_element(self, tag_name: str, tag_start: int, indent: int, i: int,
                       variables: Dict[str, str]) -> Tuple[Element, int]:
        code = self.code
        j = self._scan_modifiers(i)
        tokens = split_modifiers(code[i:j].strip())
        i = j

        attributes = self._parse_attributes(tokens)
        children: List[Element] = []
        multiline = bool(tokens) and tokens[-1] == '.'
        if multiline:
            end = self._block_end(i, indent)
            inner_text = code[i + 1:end].strip()
            i = end
        else:
            until = code.find('\n', i)
            inner_text = code[i + 1:until] if until > i else ''
            i = until
            if until < len(code) - 1:
                scope = {**variables, **attributes}
                children, i = self.parse(indent + 1, until, scope)

        line, column = self._position(tag_start)
        element = Element(
            tag_name=tag_name,
            source_file=self.options.file_path,
            attributes=attributes,
            classes=[t[1:] for t in tokens if t.startswith('.') and len(t) > 1],
            id=next((t[1:] for t in tokens if t.startswith('#')), None),
            inner_text=inner_text or None,
            children=children,
            single_tag=tag_name in SINGLE_TAGS,
            not_markdown=tag_name in NO_MARKDOWN_TAGS,
            multiline=multiline,
            line=line,
            column=column,
        )
        return element, i

    def _scan_modifiers(self, i: int) -> int:
        """Finds the space or newline that ends the modifiers starting at `i`."""
        code = self.code
        j = i
        nest = 0
        quote = None
        while True:
            if j >= len(code):
                self._fatal_error("Unmatched nest", i)
            ch = code[j]
            if quote:
                if ch == '\\':
                    j += 1
                elif ch == quote:
                    quote = None
            elif ch == '\\':
                j += 1
            elif ch in ' \n' and nest == 0:
                return j
            elif ch in QUOTES and nest:
                quote = ch
            elif ch in OPENERS:
                nest += 1
            elif ch in CLOSERS and nest:
                nest -= 1
            j += 1

    def _block_end(self, i: int, indent: int) -> int:
        """Offset of the newline in front of the first non-blank line indented at most `indent`."""
        code = self.code
        pos = code.find('\n', i)
        while pos != -1 and pos < len(code) - 1:
            next_newline = code.find('\n', pos + 1)
            line = code[pos + 1:next_newline]
            content = line.lstrip('\t')
            if content.strip() and len(line) - len(content) <= indent:
                return pos
            pos = next_newline
        return len(code) - 1

    def _parse_attributes(self, tokens: List[str]) -> Dict[str, str]:
        attributes: Dict[str, str] = {}
        for token in tokens:
            if not token.startswith('('):
                continue
            group = token[1:-1] if token.endswith(')') else token[1:]
            for pair in split_attribute_pairs(group):
                key, _, value = pair.partition('=')
                key = key.strip()
                if not key:
                    continue
                if value and self.options.path_remap_target and is_link_attribute(key):
                    value = self._remap_link(value)
                attributes[key] = value
        return attributes

    def _remap_link(self, value: str) -> str:
        """Makes a link written relative to an imported file relative to the output file."""
        bare = value
        if len(value) > 1 and value[0] in QUOTES and value[-1] == value[0]:
            bare = value[1:-1]
        if _ABSOLUTE_LINK.match(bare) or '@{' in bare:
            return value
        prefix = relative_from(go_up_one_level(self.options.path_remap_target),
                               go_up_one_level(self.options.file_path))
        joined = f"{prefix}/{bare}" if prefix else bare
        return f'"./{normalize(joined)}"'


def parse(source: str, options: CompileOptions, indent_level: int = 0, start_offset: int = 0,
          inherited_variables: Optional[Dict[str, str]] = None) -> Tuple[List[Element], int]:
    """Parses Spells source code into a list of elements and the offset parsing stopped at."""
    code = normalize_indentation(source) + '\n'
    return Parser(code, options).parse(indent_level, start_offset, dict(inherited_variables or {}))
