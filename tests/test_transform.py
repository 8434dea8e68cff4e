import asyncio

import pytest

from spells.elements import Element
from spells.errors import SpellsImportError, SpellsSyntaxError
from spells.options import CompileOptions
from spells.parser import parse
from spells.special_tags import DOCTYPE
from spells.transform import modify

OPTIONS = CompileOptions('index.spl')


def tags(elements):
    return [e.tag_name for e in elements]


def walk(elements):
    for el in elements:
        yield el
        yield from walk(el.children)


def assemble_source(source, script_compiler, options=OPTIONS, files=None):
    async def no_files(path):
        raise FileNotFoundError(path)

    elements = parse(source, options)[0]
    return asyncio.run(modify(elements, options, script_compiler, files or no_files))


def head_and_body(result):
    html = result.elements[1]
    head, body = html.children
    return head, body


def test_empty_document(script_compiler):
    result = asyncio.run(modify([], CompileOptions('f'), script_compiler))
    doctype, html = result.elements
    assert doctype == Element(DOCTYPE, 'f', single_tag=True)
    assert html.tag_name == 'html'
    assert tags(html.children) == ['head', 'body']
    head, body = html.children
    assert head.children == [Element(
        'meta', 'f',
        attributes={'name': '"viewport"', 'content': '"width=device-width,initial-scale=1.0"'},
        single_tag=True,
    )]
    assert body.children == []
    assert all(el.source_file == 'f' for el in walk(result.elements))
    assert result.script_sources == []


def test_existing_structure_is_reused(script_compiler):
    source = "html(lang=en)\n\tbody\n\t\tp x\n\thead\n\t\ttitle T\n"
    result = assemble_source(source, script_compiler)
    assert tags(result.elements) == [DOCTYPE, 'html']
    html = result.elements[1]
    assert html.attributes == {'lang': 'en'}
    head, body = head_and_body(result)
    assert tags(head.children) == ['title', 'meta']
    assert tags(body.children) == ['p']


def test_head_without_body(script_compiler):
    source = "head\n\ttitle T\np x\nspan y\n"
    head, body = head_and_body(assemble_source(source, script_compiler))
    assert tags(head.children) == ['title', 'meta']
    assert tags(body.children) == ['p', 'span']


def test_stray_elements_next_to_html_go_into_body(script_compiler):
    source = "p before\nhtml\n\tbody\n\t\tp inside\np after\n"
    result = assemble_source(source, script_compiler)
    assert tags(result.elements) == [DOCTYPE, 'html']
    head, body = head_and_body(result)
    assert [p.inner_text for p in body.children] == ['before', 'inside', 'after']


def test_head_tags_are_hoisted(script_compiler):
    source = "div\n\ttitle Hi\n\tp x\ncss.\n\tp { color: red }\nlink(rel=icon, href=a.png)\n"
    head, body = head_and_body(assemble_source(source, script_compiler))
    assert tags(head.children) == ['meta', 'title', 'style', 'link']
    assert tags(body.children) == ['div']
    assert tags(body.children[0].children) == ['p']


def test_style_with_source_becomes_link(script_compiler):
    head, body = head_and_body(assemble_source("style(src=main.css)\n", script_compiler))
    link = head.children[-1]
    assert link.tag_name == 'link'
    assert link.attributes == {'rel': '"stylesheet"', 'href': 'main.css'}
    assert body.children == []


def test_component_expansion(script_compiler):
    source = "myComp(@)\n\tspan Hello\nmyComp\n\tp World\n"
    head, body = head_and_body(assemble_source(source, script_compiler))
    assert len(body.children) == 1
    instance = body.children[0]
    assert instance.tag_name == 'div'
    assert 'myComp' in instance.classes
    assert [(c.tag_name, c.inner_text) for c in instance.children] == [('span', 'Hello'), ('p', 'World')]


def test_component_attributes_and_classes(script_compiler):
    source = "btn(@, type=button, title=t).base\nbtn(type=submit).big\n"
    instance = head_and_body(assemble_source(source, script_compiler))[1].children[0]
    assert instance.attributes == {'type': 'submit', 'title': 't'}
    assert instance.classes == ['btn', 'big', 'base']


def test_component_uses_do_not_share_children(script_compiler):
    source = "card(@)\n\tspan x\ncard\ncard\n"
    first, second = head_and_body(assemble_source(source, script_compiler))[1].children
    assert first.children[0] is not second.children[0]
    first.children[0].inner_text = 'changed'
    assert second.children[0].inner_text == 'x'


def test_component_used_before_definition_passes_through(script_compiler):
    source = "card\ncard(@)\n\tspan x\n"
    body = head_and_body(assemble_source(source, script_compiler))[1]
    assert tags(body.children) == ['card']
    assert body.children[0].children == []


def test_component_in_head_is_usable_in_body(script_compiler):
    source = "head\n\tnote(@).note\nnote hi\n"
    head, body = head_and_body(assemble_source(source, script_compiler))
    assert tags(head.children) == ['meta']
    assert body.children[0].classes == ['note', 'note']


def test_import(script_compiler, fake_files):
    files = fake_files({'parts/nav.spl': "nav\n\ta(href=home.html) Home\n"})
    source = "@import parts/nav.spl\np x\n"
    body = head_and_body(assemble_source(source, script_compiler, files=files))[1]
    assert tags(body.children) == ['nav', 'p']
    nav = body.children[0]
    assert nav.source_file == 'parts/nav.spl'
    assert nav.children[0].attributes['href'] == '"./parts/home.html"'
    assert files.reads == ['parts/nav.spl']


def test_imported_content_is_transformed(script_compiler, fake_files):
    files = fake_files({
        'lib/card.spl': "title Cards\ncard(@)\n\t@include inner.spl\n",
        'lib/inner.spl': "span inner\n",
    })
    source = "@require lib/card.spl\ncard\n"
    head, body = head_and_body(assemble_source(source, script_compiler, files=files))
    assert tags(head.children) == ['meta', 'title']
    card = body.children[0]
    assert card.classes == ['card']
    assert tags(card.children) == ['span']
    assert card.children[0].source_file == 'lib/inner.spl'


def test_empty_import_is_fatal(script_compiler):
    with pytest.raises(SpellsSyntaxError, match=r"index\.spl:2:1"):
        assemble_source("p x\n@import\n", script_compiler)


def test_missing_import_is_fatal(script_compiler, fake_files):
    with pytest.raises(SpellsImportError, match="missing.spl"):
        assemble_source("@import missing.spl\n", script_compiler, files=fake_files({}))


@pytest.mark.parametrize("src, converted", [
    ("app.ts", "app.js"),
    ('"app.ts"', '"app.js"'),
    ("lib.js", "lib.js"),
])
def test_external_script(script_compiler, src, converted):
    options = CompileOptions('index.spl', convert_script_extension_to_js=True)
    result = assemble_source(f"script(src={src})\n", script_compiler, options)
    script = head_and_body(result)[1].children[0]
    assert script.attributes['src'] == converted
    assert result.script_sources == [src.strip('"')]


def test_external_script_without_conversion(script_compiler):
    result = assemble_source("script(src=app.ts)\n", script_compiler)
    assert head_and_body(result)[1].children[0].attributes['src'] == 'app.ts'
    assert result.script_sources == ['app.ts']


def test_inline_script_is_compiled(script_compiler):
    result = assemble_source("script.\n\tlet a: number = 1\n", script_compiler)
    script = head_and_body(result)[1].children[0]
    assert script.inner_text == "/*index.spl|False*/let a: number = 1"
    assert result.script_sources == []


def test_inline_script_in_final_build(script_compiler):
    options = CompileOptions('index.spl', final=True)
    result = assemble_source("script let a = 1\n", script_compiler, options)
    assert head_and_body(result)[1].children[0].inner_text == "/*None|True*/let a = 1"


def test_heads_and_bodies_next_to_html_are_merged(script_compiler):
    source = ("head\n\ttitle T\n"
              "html\n\thead\n\t\tmeta(charset=utf-8)\n\tbody\n\t\tp x\n\tp y\n"
              "body\n\tp z\n")
    result = assemble_source(source, script_compiler)
    assert tags(result.elements) == [DOCTYPE, 'html']
    head, body = head_and_body(result)
    assert tags(head.children) == ['title', 'meta', 'meta']
    assert [p.inner_text for p in body.children] == ['x', 'y', 'z']


def test_script_with_empty_src_is_not_compiled(script_compiler):
    result = assemble_source("script(src) x\n", script_compiler)
    script = head_and_body(result)[1].children[0]
    assert script.attributes == {'src': ''}
    assert script.inner_text == 'x'
    assert result.script_sources == []
