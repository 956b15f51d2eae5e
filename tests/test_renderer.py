from pathlib import Path

import pytest
from bs4 import BeautifulSoup

from component_ssr.renderer import (
    RENDERED_ATTRIBUTE,
    RenderDepthExceeded,
    Renderer,
    build_context,
)
from component_ssr.snapshot import preserved_children
from component_ssr.styles import StylesheetError
from component_ssr.templates import JinjaTemplateService

RENDER_CASES = {
    "basic": (
        {"my-component": "Hello {{ name }}!"},
        '<my-component name="World"></my-component>',
        '<my-component name="World" data-ssr-content=\'""\' data-ssr="true">Hello World!</my-component>',
    ),
    "nested": (
        {
            "my-component": 'Hello <my-name name="{{ name }}"></my-name>!',
            "my-name": "<b>World</b>",
        },
        '<my-component name="World"></my-component>',
        '<my-component name="World" data-ssr-content=\'""\' data-ssr="true">'
        'Hello <my-name name="World" data-ssr-content=\'""\' data-ssr="true"><b>World</b></my-name>!'
        "</my-component>",
    ),
    "slot": (
        {"my-component": "<slot></slot>"},
        '<my-component><div class="foo">Hello World!</div></my-component>',
        r"""<my-component data-ssr-content='"&lt;div class=\"foo\"&gt;Hello World!&lt;/div&gt;"' data-ssr="true">"""
        '<div class="foo">Hello World!</div></my-component>',
    ),
    "slot_placeholder": (
        {"my-component": "<slot>placeholder</slot>"},
        "<my-component></my-component>",
        '<my-component data-ssr-content=\'""\' data-ssr="true">placeholder</my-component>',
    ),
    "slot_named": (
        {"my-component": 'Hello <slot name="name"></slot>'},
        '<my-component><span slot="name">World!</span></my-component>',
        r"""<my-component data-ssr-content='"&lt;span slot=\"name\"&gt;World!&lt;/span&gt;"' data-ssr="true">"""
        'Hello <span slot="name">World!</span></my-component>',
    ),
    "slot_complex": (
        {
            "my-component": (
                '<slot></slot><slot name="suffix"></slot><slot></slot>'
                '<slot name="punctuation">!</slot>'
            )
        },
        '<my-component><div slot="suffix">, ya animal</div>Hello<p>World</p></my-component>',
        r"""<my-component data-ssr-content='"&lt;div slot=\"suffix\"&gt;, ya animal&lt;/div&gt;"""
        r"""Hello&lt;p&gt;World&lt;/p&gt;"' data-ssr="true">"""
        'Hello<p>World</p><div slot="suffix">, ya animal</div>!</my-component>',
    ),
    "replace_existing_ssr_content": (
        {"my-component": "Hello {{ name }}!"},
        '<my-component name="World" data-ssr-content="Replace me"></my-component>'
        '<x-unknown data-ssr-content="Unsafe"></x-unknown>',
        '<my-component name="World" data-ssr-content=\'""\' data-ssr="true">Hello World!</my-component>'
        "<x-unknown></x-unknown>",
    ),
}


@pytest.mark.parametrize("templates,html,expected", list(RENDER_CASES.values()), ids=list(RENDER_CASES))
def test_render(templates: dict, html: str, expected: str) -> None:
    renderer = Renderer(templates)
    result = renderer.render_document(f"<wrapper>{html}</wrapper>")

    assert result.html == f"<wrapper>{expected}</wrapper>"
    assert result.rendered_tags == list(templates)


def test_render_hoists_styles_to_document_start() -> None:
    renderer = Renderer({"my-component": "<style>p { color: blue; }</style>Hello <p>{{ name }}</p>!"})

    html = renderer.render('<wrapper><my-component name="World"></my-component></wrapper>')

    assert html == (
        "<style>my-component p {color: blue !important;}</style>"
        '<wrapper><my-component name="World" data-ssr-content=\'""\' data-ssr="true">'
        "Hello <p>World</p>!</my-component></wrapper>"
    )


def test_render_rewrites_host_selectors() -> None:
    renderer = Renderer(
        {
            "my-component": (
                "<style>:host { display: block; } :host(.foo) { display: none; }</style>"
                "Hello {{ name }}!"
            )
        }
    )

    html = renderer.render('<wrapper><my-component name="World"></my-component></wrapper>')

    assert html.startswith(
        "<style>my-component {display: block !important;}\n"
        "my-component.foo {display: none !important;}</style><wrapper>"
    )


def test_render_with_template_directory(tmp_path: Path) -> None:
    components = tmp_path / "templates" / "components"
    components.mkdir(parents=True)
    (components / "my-component.html").write_text("Hello {{ name }}!", encoding="utf-8")

    service = JinjaTemplateService.from_directories([components])
    renderer = Renderer({"my-component": "my-component.html"}, service)

    assert renderer.render('<my-component name="World"></my-component>') == (
        '<my-component name="World" data-ssr-content=\'""\' data-ssr="true">Hello World!</my-component>'
    )


def test_rerendering_output_is_a_no_op() -> None:
    renderer = Renderer(
        {
            "my-card": '<style>h2 { margin: 0; }</style><h2><slot name="title">Untitled</slot></h2><slot></slot>',
            "my-badge": "<em>{{ label }}</em>",
        }
    )
    source = (
        "<!DOCTYPE html><html><head><title>t</title></head><body>"
        '<my-card><span slot="title">Card</span><p>Body <my-badge label="new"></my-badge></p></my-card>'
        "<br></body></html>"
    )

    first = renderer.render(source)
    second = renderer.render_document(first)

    assert second.html == first
    assert second.instances == 0
    assert second.stylesheet == ""


def test_repeated_rerendering_keeps_the_doctype_line_stable() -> None:
    renderer = Renderer({"x-a": "<b>a</b>"})

    once = renderer.render("<!DOCTYPE html><html><body><x-a></x-a></body></html>")
    thrice = renderer.render(renderer.render(once))

    assert once.startswith("<!DOCTYPE html><html>")
    assert thrice == once


def test_every_component_instance_is_marked() -> None:
    renderer = Renderer(
        {
            "x-list": "<ul><x-item></x-item><x-item></x-item><slot></slot></ul>",
            "x-item": "<li>item</li>",
        }
    )

    result = renderer.render_document("<x-list><x-item></x-item></x-list><x-item></x-item>")
    soup = BeautifulSoup(result.html, "html.parser")
    tags = soup.find_all(["x-list", "x-item"])

    assert len(tags) == 5
    assert all(tag.get(RENDERED_ATTRIBUTE) == "true" for tag in tags)
    assert result.instances == 5
    assert result.rendered_tags == ["x-list", "x-item"]


def test_tag_names_are_visited_in_registration_order() -> None:
    calls: list[str] = []

    class RecordingService:
        def render(self, identifier, context):
            calls.append(identifier)
            return identifier

    renderer = Renderer({"b-tag": "b", "a-tag": "a"}, RecordingService())
    renderer.render("<a-tag></a-tag><b-tag></b-tag><a-tag></a-tag>")

    assert calls == ["b", "a", "a"]


def test_context_is_built_from_attributes() -> None:
    seen: list[dict] = []

    class RecordingService:
        def render(self, identifier, context):
            seen.append(dict(context))
            return ""

    renderer = Renderer({"my-component": "my-component"}, RecordingService())
    renderer.render('<my-component foo-bar="X" data-id="7"></my-component>')

    assert seen == [{"foo_bar": "X", "data_id": "7"}]


def test_context_last_declared_attribute_wins() -> None:
    soup = BeautifulSoup('<my-component foo-bar="1" foo_bar="2"></my-component>', "html.parser")

    assert build_context(soup.find("my-component")) == {"foo_bar": "2"}


def test_snapshot_keeps_original_children() -> None:
    renderer = Renderer({"my-component": "<section><slot></slot></section>"})

    html = renderer.render("<my-component><b>Hi</b> there</my-component>")
    tag = BeautifulSoup(html, "html.parser").find("my-component")

    assert preserved_children(tag) == "<b>Hi</b> there"
    assert tag.section is not None


def test_named_and_default_slots_do_not_leak() -> None:
    renderer = Renderer(
        {"my-layout": '<header><slot name="head"></slot></header><main><slot></slot></main>'}
    )

    html = renderer.render('<my-layout><h1 slot="head">Title</h1><p>Text</p></my-layout>')
    soup = BeautifulSoup(html, "html.parser")

    assert [tag.name for tag in soup.header.find_all(True)] == ["h1"]
    assert [tag.name for tag in soup.main.find_all(True)] == ["p"]


def test_styles_are_registered_once_per_tag() -> None:
    renderer = Renderer({"my-component": "<style>p { color: red; }</style><p>x</p>"})

    result = renderer.render_document(
        "<html><head></head><body><my-component></my-component><my-component></my-component></body></html>"
    )
    soup = BeautifulSoup(result.html, "html.parser")

    styles = soup.find_all("style")
    assert len(styles) == 1
    assert styles[0].parent.name == "head"
    assert styles[0].string == "my-component p {color: red !important;}"


def test_styles_go_to_body_without_head() -> None:
    renderer = Renderer({"my-component": "<style>p { color: red; }</style><p>x</p>"})

    html = renderer.render("<body><h1>Title</h1><my-component></my-component></body>")

    assert html.startswith("<body><style>my-component p {color: red !important;}</style><h1>")


def test_each_render_call_collects_its_own_styles() -> None:
    renderer = Renderer({"my-component": "<style>p { color: red; }</style><p>x</p>"})

    first = renderer.render_document("<my-component></my-component>")
    second = renderer.render_document("<my-component></my-component>")

    assert first.stylesheet == second.stylesheet == "my-component p {color: red !important;}"


def test_unregistered_tags_pass_through() -> None:
    renderer = Renderer({"my-component": "Hello"})

    html = renderer.render('<other-component title="x"><slot>kept</slot></other-component>')

    assert html == '<other-component title="x"><slot>kept</slot></other-component>'


def test_self_referencing_template_hits_depth_limit() -> None:
    renderer = Renderer({"my-loop": "<my-loop></my-loop>"}, max_depth=5)

    with pytest.raises(RenderDepthExceeded) as excinfo:
        renderer.render("<my-loop></my-loop>")

    assert excinfo.value.tag_name == "my-loop"
    assert excinfo.value.depth == 6


def test_invalid_component_stylesheet_fails_the_render() -> None:
    renderer = Renderer({"my-component": "<style>..broken { color: red; }</style>x"})

    with pytest.raises(StylesheetError):
        renderer.render("<my-component></my-component>")


def test_malformed_markup_does_not_raise() -> None:
    renderer = Renderer({"my-component": "<b>ok</b>"})

    html = renderer.render("<div><my-component></div><p>unclosed")

    assert "<b>ok</b>" in html
    assert "unclosed" in html


def test_attribute_values_are_escaped_in_templates() -> None:
    renderer = Renderer({"my-component": "<span>{{ label }}</span>"})

    html = renderer.render('<my-component label="&lt;script&gt;"></my-component>')

    assert "<span>&lt;script&gt;</span>" in html


def test_children_without_a_slot_are_counted_as_discarded() -> None:
    renderer = Renderer({"x-plain": "<p>fixed</p>", "x-framed": "<div><slot></slot></div>"})

    result = renderer.render_document(
        "<x-plain><b>lost</b><i>also lost</i></x-plain><x-framed><b>kept</b></x-framed>"
    )

    assert result.discarded == 2
    plain = BeautifulSoup(result.html, "html.parser").find("x-plain")
    assert plain.decode_contents() == "<p>fixed</p>"
    assert "<div><b>kept</b></div>" in result.html
