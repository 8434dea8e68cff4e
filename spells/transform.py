import copy
import logging
from collections import deque
from typing import Awaitable, Callable, Dict, List, NamedTuple, Optional

from . import paths
from .elements import Element, unquote
from .errors import SpellsImportError, SpellsSyntaxError
from .options import CompileOptions
from .parser import parse
from .scripts import ScriptCompiler, default_script_compiler
from .special_tags import COMPONENT_MARKER, DOCTYPE, HEAD_TAGS, IMPORT_TAGS

logger = logging.getLogger(__name__)

Reader = Callable[[str], Awaitable[str]]


class CrawlContext(NamedTuple):
    # Options of the root file being compiled
    options: CompileOptions
    script_compiler: ScriptCompiler
    read_text: Reader


class CrawlResult(NamedTuple):
    elements: List[Element]
    script_sources: List[str]
    head_elements: List[Element]


class AssembleResult(NamedTuple):
    elements: List[Element]
    script_sources: List[str]


async def crawl(elements: List[Element], components: Dict[str, Element], inside_head: bool,
                context: CrawlContext) -> CrawlResult:
    """
    Takes care of imports, components, `style`/`script` shorthands and elements
    that belong in the head. Works depth-first and returns a new list of elements;
    the tree below the returned elements is updated in place.

    Everything happens in document order, so a component has to be defined before
    it's used.
    """
    output: List[Element] = []
    script_sources: List[str] = []
    head_elements: List[Element] = []
    pending = deque(elements)

    while pending:
        el = pending.popleft()
        if el.tag_name in IMPORT_TAGS:
            # imported elements go through the same rules
            pending.extendleft(reversed(await _import(el, context)))
            continue

        if el.tag_name == 'css':
            el.tag_name = 'style'

        if el.tag_name in components:
            instance = _instantiate(components[el.tag_name], el)
            result = await crawl(instance.children, components, inside_head, context)
            instance.children = result.elements
            script_sources.extend(result.script_sources)
            head_elements.extend(result.head_elements)
            output.append(instance)
            continue

        if COMPONENT_MARKER in el.attributes:
            name = el.tag_name
            del el.attributes[COMPONENT_MARKER]
            el.tag_name = 'div'
            components[name] = el
            logger.debug("Registered component %s from %s", name, el.source_file)
            continue

        if el.tag_name == 'style' and 'src' in el.attributes:
            el.tag_name = 'link'
            el.attributes = {'rel': '"stylesheet"', 'href': el.attributes['src']}
        elif el.tag_name == 'script':
            if 'src' in el.attributes:
                src = el.attributes['src']
                if context.options.convert_script_extension_to_js:
                    el.attributes['src'] = _ts_to_js(src)
                if unquote(src):
                    script_sources.append(unquote(src))
            elif el.inner_text:
                el.inner_text = await _compile_inline_script(el, context)

        if el.children:
            result = await crawl(el.children, components, inside_head, context)
            el.children = result.elements
            script_sources.extend(result.script_sources)
            head_elements.extend(result.head_elements)

        if not inside_head and el.tag_name in HEAD_TAGS:
            head_elements.append(el)
        else:
            output.append(el)

    return CrawlResult(output, script_sources, head_elements)


async def _import(el: Element, context: CrawlContext) -> List[Element]:
    path_text = (el.inner_text or '').strip()
    if not path_text:
        raise SpellsSyntaxError("Please provide a file to import", el.source_file, el.position)

    path = paths.normalize(paths.go_up_one_level(el.source_file) + path_text)
    try:
        code = await context.read_text(path)
    except (OSError, UnicodeDecodeError) as e:
        raise SpellsImportError(f"Could not import {path} (from {el.source_file}): {e}") from e

    logger.debug("Importing %s into %s", path, context.options.file_path)
    return parse(code, context.options.for_import(path))[0]


def _instantiate(template: Element, use: Element) -> Element:
    """A fresh element for one use of a component. The use's children fill the slot at the end."""
    attributes = {**template.attributes, **use.attributes}
    attributes.pop(COMPONENT_MARKER, None)
    return Element(
        tag_name=template.tag_name,
        source_file=template.source_file,
        attributes=attributes,
        classes=[use.tag_name, *use.classes, *template.classes],
        id=template.id,
        inner_text=template.inner_text,
        children=copy.deepcopy(template.children) + use.children,
        single_tag=template.single_tag,
        not_markdown=template.not_markdown,
        multiline=template.multiline,
        line=use.line,
        column=use.column,
    )


def _ts_to_js(src: str) -> str:
    if src.endswith('.ts'):
        return src[:-2] + 'js'
    if src[-4:] in ('.ts"', ".ts'"):
        return src[:-3] + 'js' + src[-1]
    return src


async def _compile_inline_script(el: Element, context: CrawlContext) -> str:
    if context.options.final:
        return await context.script_compiler.compile(el.inner_text, minify=True)
    return await context.script_compiler.compile(el.inner_text, el.source_file)


def viewport_meta(file_path: str) -> Element:
    """<meta name="viewport" content="width=device-width,initial-scale=1.0">"""
    return Element(
        tag_name='meta',
        source_file=file_path,
        attributes={
            'name': '"viewport"',
            'content': '"width=device-width,initial-scale=1.0"',
        },
        single_tag=True,
    )


async def assemble(elements: List[Element], options: CompileOptions,
                   script_compiler: Optional[ScriptCompiler] = None,
                   read_text: Reader = paths.read_text) -> AssembleResult:
    """
    Gives the tree the shape browsers end up with: a doctype and one `html` holding
    a `head` and then a `body`. Runs `crawl` over the head first and then over
    everything else, moving hoisted elements into the head.
    """
    root = options.file_path
    context = CrawlContext(options, script_compiler or default_script_compiler, read_text)

    index = next((n for n, e in enumerate(elements) if e.tag_name == 'html'), None)
    if index is None:
        html = Element('html', root)
        children = list(elements)
    else:
        html = elements[index]
        # stray top-level elements next to an authored <html> move inside it
        children = elements[:index] + html.children + elements[index + 1:]

    # the first head and body are kept, later ones only give up their children
    heads = [c for c in children if c.tag_name == 'head']
    head = heads[0] if heads else Element('head', root)
    for extra in heads[1:]:
        head.children = head.children + extra.children

    bodies = [c for c in children if c.tag_name == 'body']
    body = bodies[0] if bodies else Element('body', root)
    body_children: List[Element] = []
    for child in children:
        if child.tag_name == 'body':
            body_children.extend(child.children)
        elif child.tag_name != 'head':
            body_children.append(child)
    body.children = body_children
    html.children = [body]

    head.children.append(viewport_meta(root))

    components: Dict[str, Element] = {}
    head_result = await crawl(head.children, components, True, context)
    head.children = head_result.elements + head_result.head_elements

    result = await crawl(html.children, components, False, context)
    head.children.extend(result.head_elements)
    html.children = [head] + result.elements

    doctype = Element(DOCTYPE, root, single_tag=True)
    return AssembleResult([doctype, html], head_result.script_sources + result.script_sources)


modify = assemble
