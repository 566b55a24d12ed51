"""End-to-end tests for JsonTemplate: setup, rendering and reactivity."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import replace

import pytest

from jsonbind import (
    DEFAULT_CONFIG,
    Document,
    JsonTemplate,
    TemplateElement,
    bind_document,
    to_html,
)
from jsonbind.dom import Element

from .conftest import build_page, rendered, set_source

Bind = Callable[..., tuple[Document, JsonTemplate]]


def _out(document: Document) -> Element:
    container = document.get_element_by_id("out")
    assert container is not None
    return container


class TestSetup:
    """connect() validation and the initial render."""

    def test_initial_render(self, bind: Bind) -> None:
        document, binding = bind({"name": "Ada"}, "<p>Hello {name}</p>")
        assert binding.connected
        assert rendered(_out(document)) == "<p>Hello Ada</p>"

    def test_template_preserved(self, bind: Bind) -> None:
        document, _ = bind({"name": "Ada"}, "<p>{name}</p>")
        templates = [c for c in _out(document).children if isinstance(c, TemplateElement)]
        assert len(templates) == 1

    def test_container_attributes_preserved(self) -> None:
        document = Document.from_html(
            '<script id="data">{"x": 1}</script>'
            '<section id="out" is="behavioral-section" behavior="json-template" '
            'json-template-for="data"><template><b>{x}</b></template></section>'
        )
        binding = JsonTemplate(_out(document))
        assert binding.connect()
        assert _out(document).attributes == {
            "id": "out",
            "is": "behavioral-section",
            "behavior": "json-template",
            "json-template-for": "data",
        }

    def test_missing_for_attribute(self, caplog: pytest.LogCaptureFixture) -> None:
        document = Document.from_html('<div id="out"><template><p>x</p></template></div>')
        with caplog.at_level(logging.ERROR, logger="jsonbind"):
            assert not JsonTemplate(_out(document)).connect()
        assert "json-template-for attribute is required" in caplog.text
        assert "JT-CFG-001" in caplog.text
        assert rendered(_out(document)) == ""

    def test_detached_container(self, caplog: pytest.LogCaptureFixture) -> None:
        container = Element("div", {"json-template-for": "data"})
        with caplog.at_level(logging.ERROR, logger="jsonbind"):
            assert not JsonTemplate(container).connect()
        assert "JT-CFG-002" in caplog.text

    def test_source_not_found(self, caplog: pytest.LogCaptureFixture) -> None:
        document = build_page({"x": 1}, "<p>{x}</p>", source_id="data")
        _out(document).set_attribute("json-template-for", "elsewhere")
        with caplog.at_level(logging.ERROR, logger="jsonbind"):
            assert not JsonTemplate(_out(document)).connect()
        assert "Data source element not found" in caplog.text
        assert rendered(_out(document)) == ""

    def test_source_not_found_is_permanent(self, caplog: pytest.LogCaptureFixture) -> None:
        """A source that appears later is never picked up."""
        document = build_page({"n": 1}, "<p>{n}</p>")
        _out(document).set_attribute("json-template-for", "late")
        binding = JsonTemplate(_out(document))
        with caplog.at_level(logging.ERROR, logger="jsonbind"):
            assert not binding.connect()
        assert binding.inert

        late = Element("script", {"id": "late"})
        late.text_content = '{"n": 2}'
        document.append_child(late)
        caplog.clear()
        with caplog.at_level(logging.ERROR, logger="jsonbind"):
            assert not binding.connect()
            assert not binding.render()
        assert caplog.text == ""
        assert binding.source is not None and binding.source.element is None
        assert not binding.connected
        assert rendered(_out(document)) == ""

    def test_no_template(self, caplog: pytest.LogCaptureFixture) -> None:
        document = Document.from_html(
            '<script id="data">{}</script><div id="out" json-template-for="data"><p>x</p></div>'
        )
        with caplog.at_level(logging.ERROR, logger="jsonbind"):
            assert not JsonTemplate(_out(document)).connect()
        assert "No <template> element found as direct child" in caplog.text

    def test_no_template_is_permanent(self) -> None:
        document = Document.from_html(
            '<script id="data">{"x": 1}</script><div id="out" json-template-for="data"></div>'
        )
        binding = JsonTemplate(_out(document))
        assert not binding.connect()

        template = TemplateElement()
        template.content.append_child(Element("p"))
        _out(document).append_child(template)
        assert not binding.connect()
        assert binding.scheduler.render_count == 0
        assert rendered(_out(document)) == ""

    def test_nested_template_is_not_direct_child(self, caplog: pytest.LogCaptureFixture) -> None:
        document = Document.from_html(
            '<script id="data">{}</script>'
            '<div id="out" json-template-for="data"><div><template>x</template></div></div>'
        )
        with caplog.at_level(logging.ERROR, logger="jsonbind"):
            assert not JsonTemplate(_out(document)).connect()
        assert "JT-TPL-001" in caplog.text

    def test_invalid_json_at_setup(self, bind: Bind, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.ERROR, logger="jsonbind"):
            document, binding = bind(None, "<p>{x}</p>", raw="{not json")
        assert "Invalid JSON in source element" in caplog.text
        assert rendered(_out(document)) == ""
        assert binding.connected

    def test_empty_source_does_not_render(self, bind: Bind) -> None:
        document, _ = bind(None, "<div>{name}</div>", raw="")
        container = _out(document)
        assert container.query("div") is None
        assert container.query("template") is not None

    @pytest.mark.parametrize("constant", ["NaN", "Infinity", "-Infinity"])
    def test_non_json_constants_rejected(self, bind: Bind, constant: str) -> None:
        document, _ = bind(None, "<p>{v}</p>", raw=f'{{"v": {constant}}}')
        assert rendered(_out(document)) == ""

    def test_connect_twice_is_noop(self, bind: Bind) -> None:
        document, binding = bind({"n": 1}, "<p>{n}</p>")
        count = binding.scheduler.render_count
        assert binding.connect()
        assert binding.scheduler.render_count == count
        assert rendered(_out(document)) == "<p>1</p>"

    def test_custom_config(self) -> None:
        config = replace(DEFAULT_CONFIG, source_attr="data-source", array_attr="data-each")
        document = Document.from_html(
            '<script id="d">{"xs": [1, 2]}</script>'
            '<div id="out" data-source="d"><template>'
            '<template data-each="xs"><i>{missing || "-"}</i></template>'
            "</template></div>"
        )
        assert JsonTemplate(_out(document), config=config).connect()
        assert rendered(_out(document)) == (
            '<i>-</i><i>-</i><template data-each="xs"><i>{missing || "-"}</i></template>'
        )


class TestRendering:
    """Output for representative pages."""

    def test_fallbacks_in_page(self, bind: Bind) -> None:
        document, _ = bind(
            {"user": {"name": "", "visits": 0, "admin": False}},
            "<p>{user.name || 'Guest'}|{user.visits ?? 'n/a'}|{user.admin && 'Admin'}</p>",
        )
        assert rendered(_out(document)) == "<p>Guest|0|false</p>"

    def test_negative_indices(self, bind: Bind) -> None:
        document, _ = bind(
            {"items": ["a", "b", "c"]},
            "<p>{items[-1]}|{items[-2]}|{items[-4] || 'none'}</p>",
        )
        assert rendered(_out(document)) == "<p>c|b|none</p>"

    def test_form_with_empty_array(self, bind: Bind) -> None:
        """A root-level empty list still renders an editable form."""
        document, _ = bind(
            [],
            '<form><input name="title" value="{title || \'\'}">'
            "<button>{label || 'Add'}</button></form>",
        )
        assert rendered(_out(document)) == '<form><input name="title" value=""><button>Add</button></form>'

    def test_object_value_in_page(self, bind: Bind) -> None:
        document, _ = bind({"user": {"name": "Ada", "tags": ["x"]}}, "<p>{user}</p>")
        assert rendered(_out(document)) == '<p>{"name":"Ada","tags":["x"]}</p>'

    def test_nested_behavior_markup_preserved(self, bind: Bind) -> None:
        document, _ = bind(
            {"title": "Hi"},
            '<dialog is="behavioral-reveal" behavior="reveal"><h2>{title}</h2></dialog>',
        )
        assert rendered(_out(document)) == (
            '<dialog is="behavioral-reveal" behavior="reveal"><h2>Hi</h2></dialog>'
        )


class TestReactivity:
    """Re-rendering when the source changes."""

    def test_rerender_on_change(self, bind: Bind) -> None:
        document, _ = bind({"name": "Ada"}, "<p>{name}</p>")
        assert set_source(document, {"name": "Grace"}) == 1
        assert rendered(_out(document)) == "<p>Grace</p>"

    def test_burst_of_writes_coalesced(self, bind: Bind) -> None:
        document, binding = bind({"n": 0}, "<p>{n}</p>")
        source = document.get_element_by_id("data")
        assert source is not None
        for n in range(1, 6):
            source.text_content = json.dumps({"n": n})
        before = binding.scheduler.render_count
        assert document.flush_mutations() == 1
        assert binding.scheduler.render_count == before + 1
        assert rendered(_out(document)) == "<p>5</p>"

    def test_edit_text_node_in_place(self, bind: Bind) -> None:
        """Character-data edits inside the source are observed."""
        document, _ = bind({"n": 1}, "<p>{n}</p>")
        source = document.get_element_by_id("data")
        assert source is not None
        text = source.children[0]
        text.data = '{"n": 2}'  # type: ignore[attr-defined]
        document.flush_mutations()
        assert rendered(_out(document)) == "<p>2</p>"

    def test_root_array_transitions(self, bind: Bind) -> None:
        document, _ = bind([], '<div class="item">{name || "Empty"}</div>')
        container = _out(document)
        assert [e.text_content for e in container.query_all(class_name="item")] == ["Empty"]

        set_source(document, [{"name": "A"}, {"name": "B"}])
        assert [e.text_content for e in container.query_all(class_name="item")] == ["A", "B"]

        set_source(document, [])
        assert [e.text_content for e in container.query_all(class_name="item")] == ["Empty"]

    def test_invalid_json_keeps_stale_output(
        self, bind: Bind, caplog: pytest.LogCaptureFixture
    ) -> None:
        document, _ = bind({"name": "Ada"}, "<p>{name}</p>")
        with caplog.at_level(logging.ERROR, logger="jsonbind"):
            set_source(document, "{oops")
        assert "JT-SRC-002" in caplog.text
        assert rendered(_out(document)) == "<p>Ada</p>"

        set_source(document, {"name": "Grace"})
        assert rendered(_out(document)) == "<p>Grace</p>"

    def test_render_does_not_trigger_itself(self, bind: Bind) -> None:
        document, binding = bind({"name": "Ada"}, "<p>{name}</p>")
        assert document.flush_mutations() == 0
        assert binding.render()
        assert document.flush_mutations() == 0
        assert binding.scheduler.render_count == 2

    def test_unrelated_changes_ignored(self, bind: Bind) -> None:
        document, binding = bind({"name": "Ada"}, "<p>{name}</p>")
        _out(document).set_attribute("title", "changed")
        document.append_child(Element("aside"))
        assert document.flush_mutations() == 0
        assert binding.scheduler.render_count == 1

    def test_disconnect(self, bind: Bind) -> None:
        document, binding = bind({"name": "Ada"}, "<p>{name}</p>")
        binding.disconnect()
        binding.disconnect()
        assert not binding.connected

        set_source(document, {"name": "Grace"})
        assert rendered(_out(document)) == "<p>Ada</p>"

    def test_reconnect_after_disconnect(self, bind: Bind) -> None:
        document, binding = bind({"name": "Ada"}, "<p>{name}</p>")
        binding.disconnect()
        set_source(document, {"name": "Grace"})
        assert binding.connect()
        assert rendered(_out(document)) == "<p>Grace</p>"

    def test_reconnect_with_top_level_marker(
        self, bind: Bind, caplog: pytest.LogCaptureFixture
    ) -> None:
        """The marker copy left in the output is not mistaken for the template."""
        marker = '<template data-array="users"><li>{name}</li></template>'
        document, binding = bind({"users": [{"name": "A"}]}, marker)
        template = binding.scheduler.template
        assert template is not None and template.attributes == {}

        with caplog.at_level(logging.WARNING, logger="jsonbind"):
            binding.disconnect()
            assert binding.connect()
            set_source(document, {"users": [{"name": "A"}, {"name": "B"}]})
        assert binding.scheduler.template is template
        assert "JT-TPL-002" not in caplog.text
        assert "JT-RUN-001" not in caplog.text
        assert to_html(_out(document)) == (
            '<div id="out" json-template-for="data">'
            f"<li>A</li><li>B</li>{marker}<template>{marker}</template></div>"
        )

    def test_context_manager(self) -> None:
        document = build_page({"n": 1}, "<p>{n}</p>")
        with JsonTemplate(_out(document)) as binding:
            assert binding.connected
        assert not binding.connected
        assert rendered(_out(document)) == "<p>1</p>"

    def test_unexpected_error_is_contained(
        self, bind: Bind, caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        document, binding = bind({"name": "Ada"}, "<p>{name}</p>")

        def explode(*args: object, **kwargs: object) -> bool:
            raise RuntimeError("boom")

        monkeypatch.setattr(binding.scheduler, "render", explode)
        with caplog.at_level(logging.ERROR, logger="jsonbind"):
            set_source(document, {"name": "Grace"})
        assert "JT-RUN-001" in caplog.text
        assert rendered(_out(document)) == "<p>Ada</p>"


class TestBindDocument:
    """Binding every container in a document."""

    PAGE = (
        '<script id="a">{"v": "A"}</script>'
        '<script id="b">{"v": "B"}</script>'
        '<div id="one" json-template-for="a"><template><i>{v}</i></template></div>'
        '<div id="two" behavior="reveal json-template" json-template-for="b">'
        "<template><i>{v}</i></template></div>"
        '<div id="three" behavior="json-template"><template><i>{v}</i></template></div>'
        '<div id="plain"><template><i>{v}</i></template></div>'
    )

    def test_binds_marked_containers(self, caplog: pytest.LogCaptureFixture) -> None:
        document = Document.from_html(self.PAGE)
        with caplog.at_level(logging.ERROR, logger="jsonbind"):
            bindings = bind_document(document)
        assert [b.container.id for b in bindings] == ["one", "two", "three"]
        assert [b.connected for b in bindings] == [True, True, False]
        assert "json-template-for attribute is required" in caplog.text

        plain = document.get_element_by_id("plain")
        assert plain is not None and rendered(plain) == ""

    def test_single_container(self) -> None:
        document = Document.from_html(self.PAGE)
        bindings = bind_document(document, container_id="two")
        assert [b.container.id for b in bindings] == ["two"]
        one = document.get_element_by_id("one")
        assert one is not None and rendered(one) == ""

    def test_containers_render_independently(self) -> None:
        document = Document.from_html(self.PAGE)
        bind_document(document)
        source = document.get_element_by_id("a")
        assert source is not None
        source.text_content = '{"v": "A2"}'
        document.flush_mutations()
        one, two = document.get_element_by_id("one"), document.get_element_by_id("two")
        assert one is not None and two is not None
        assert rendered(one) == "<i>A2</i>"
        assert rendered(two) == "<i>B</i>"
