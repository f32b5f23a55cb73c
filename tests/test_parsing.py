"""
Tests for the markup layer.

Verifies that:
- Pruning drops scripts, styles and comments but keeps attributes
- Form-control discovery skips hidden and disabled controls
- Detection contexts record document, iframe and shadow-root facts
- XPath descriptors are stable and identity based
"""
import pytest
from pydantic import ValidationError

from parsing.candidates import find_form_controls
from parsing.context import build_context
from parsing.filtering import is_disabled, is_hidden, is_visible, visible_text
from parsing.labels import closest_matching, precedes
from parsing.pruning import prune_html
from parsing.selectors import css_descriptor, element_xpath


class TestPruning:
    """Tests for prune_html."""

    def test_strips_non_semantic_content(self):
        soup = prune_html(
            "<html><head><script>var x;</script><style>p{}</style>"
            '<link rel="stylesheet" href="bootstrap.css"></head>'
            '<body><!-- note --><input class="form-control" data-test="a"></body></html>'
        )

        assert soup.find("script") is None
        assert soup.find("style") is None
        assert "note" not in str(soup)
        assert soup.find("link") is not None
        assert soup.find("input")["data-test"] == "a"


class TestFormControls:
    """Tests for form-control discovery."""

    HTML = (
        '<form><input id="a"><input type="hidden" id="b">'
        '<div style="display: none"><input id="c"></div>'
        '<input id="d" disabled>'
        '<fieldset disabled><select id="e"></select></fieldset>'
        '<textarea id="f"></textarea><div role="combobox" id="g"></div>'
        "<button id=\"h\">Go</button></form>"
    )

    def test_visible_enabled_controls_in_document_order(self, parse):
        controls = find_form_controls(parse(self.HTML))
        assert [c["id"] for c in controls] == ["a", "f", "g", "h"]

    def test_selector_returns_matches_unfiltered(self, parse):
        controls = find_form_controls(parse(self.HTML), "input")
        assert [c["id"] for c in controls] == ["a", "b", "c", "d"]


class TestFiltering:
    """Tests for visibility and text helpers."""

    def test_hidden_markers(self, parse):
        soup = parse(
            '<p id="a" hidden></p><p id="b" aria-hidden="true"></p>'
            '<p id="c" style="visibility: hidden"></p><p id="d" class="d-none"></p>'
            '<p id="e"></p>'
        )
        hidden = {p["id"]: is_hidden(p) for p in soup.find_all("p")}
        assert hidden == {"a": True, "b": True, "c": True, "d": True, "e": False}

    def test_visibility_inherits_from_ancestors(self, parse):
        soup = parse('<div hidden><span id="inner">x</span></div>')
        assert not is_visible(soup.find(id="inner"))

    def test_visible_text_skips_style_hidden(self, parse):
        soup = parse(
            '<label id="l">Email <span style="display:none">secret</span>'
            '<span class="sr-only">address</span></label>'
        )
        assert visible_text(soup.find(id="l")) == "Email address"

    def test_visible_text_skip_predicate(self, parse):
        soup = parse('<div id="t">Title <b class="num">1.</b></div>')
        text = visible_text(soup.find(id="t"), skip=lambda el: "num" in el.get("class", []))
        assert text == "Title"

    def test_disabled(self, parse):
        soup = parse('<input id="a" aria-disabled="true"><input id="b">')
        assert is_disabled(soup.find(id="a"))
        assert not is_disabled(soup.find(id="b"))


class TestNavigation:
    """Tests for document-order helpers."""

    def test_precedes(self, parse):
        soup = parse('<p id="a"></p><p id="b"></p>')
        assert precedes(soup.find(id="a"), soup.find(id="b"))
        assert not precedes(soup.find(id="b"), soup.find(id="a"))

    def test_closest_matching_includes_self(self, parse):
        soup = parse('<div class="outer"><div class="inner" id="x"></div></div>')
        el = soup.find(id="x")
        assert closest_matching(el, ".inner") is el
        assert closest_matching(el, ".outer")["class"] == ["outer"]
        assert closest_matching(el, ".missing") is None


class TestSelectors:
    """Tests for XPath and CSS descriptors."""

    def test_id_short_circuit(self, parse):
        soup = parse('<div><input id="email"></div>')
        assert element_xpath(soup.find("input")) == '//*[@id="email"]'

    def test_positional_steps_use_identity(self, parse):
        # Identical siblings compare equal, so positions must come from identity.
        soup = parse("<div><input><input></div>")
        second = soup.find_all("input")[1]
        assert element_xpath(second) == "/html/body/div/input[2]"

    def test_css_descriptor(self, parse):
        soup = parse('<input class="form-control form-control-lg extra">')
        assert css_descriptor(soup.find("input")) == "input.form-control.form-control-lg"


class TestBuildContext:
    """Tests for detection context construction."""

    def test_document_is_parse_root(self, parse):
        soup = parse('<input id="x">')
        ctx = build_context(soup.find(id="x"), page_url="https://example.com/signup")

        assert ctx.document is soup
        assert ctx.page_url == "https://example.com/signup"
        assert ctx.is_in_iframe is False
        assert ctx.is_in_shadow_dom is False
        assert ctx.window is None

    def test_base_href_fills_missing_url(self, parse):
        soup = parse('<head><base href="https://example.com/"></head><body><input id="x"></body>')
        assert build_context(soup.find(id="x")).page_url == "https://example.com/"

    def test_declarative_shadow_root(self, parse):
        soup = parse(
            '<div><template shadowrootmode="open"><input id="x"></template></div>'
        )
        ctx = build_context(soup.find(id="x"))

        assert ctx.is_in_shadow_dom is True
        assert ctx.shadow_root.name == "template"

    def test_iframe_flag_from_extra(self, parse):
        soup = parse('<input id="x">')
        ctx = build_context(soup.find(id="x"), extra={"in_iframe": True})

        assert ctx.is_in_iframe is True
        assert ctx.extra == {"in_iframe": True}

    def test_context_is_frozen(self, parse):
        ctx = build_context(parse('<input id="x">').find(id="x"))
        with pytest.raises(ValidationError):
            ctx.page_url = "changed"
