"""
Tests for Suppression — inline patchly directives

These tests validate:
- ignore-line suppresses only its own line
- disable-next-line suppresses only the following line
- Block directives nest by nearest rule-compatible open
- Unmatched tokens are dropped silently
- Parsed state is cached per document version
- ignore_next_line edits the document and invalidates the cache
"""

from patchly.core.document import Document
from patchly.core.literals import scan_literals
from patchly.core.suppression import (
    SuppressionCache, SuppressionEngine, parse_directives, next_line_directive,
)


def ignored_bodies(engine, text, rule=None):
    """Bodies of the literals the engine suppresses, in order."""
    doc = Document("file:///t.js", text)
    state = engine.parse(doc, rule)
    return [span.body for span in scan_literals(text) if engine.is_ignored(span, doc, state)]


class TestLineDirectives:
    """ignore-line and disable-next-line."""

    def test_ignore_line_suppresses_same_line_only(self, engine):
        """An identical literal one line below is still reported."""
        text = (
            "const a = /(a+)+/; // patchly-ignore-line redos\n"
            "const b = /(a*)*/;\n"
        )
        assert ignored_bodies(engine, text) == ["(a+)+"]

    def test_disable_next_line_targets_following_line(self, engine):
        """Line N+1 only, never N or N+2."""
        text = (
            "const a = /a1/; // patchly-disable-next-line redos\n"
            "const b = /b2/;\n"
            "const c = /c3/;\n"
        )
        assert ignored_bodies(engine, text) == ["b2"]

    def test_standalone_next_line_comment(self, engine):
        text = (
            "const a = /a1/;\n"
            "// patchly-disable-next-line redos\n"
            "const b = /b2/;\n"
            "const c = /c3/;\n"
        )
        assert ignored_bodies(engine, text) == ["b2"]

    def test_directive_without_rule_matches_every_rule(self, engine):
        text = "const a = /a1/; // patchly-ignore-line\n"
        assert ignored_bodies(engine, text) == ["a1"]
        assert ignored_bodies(engine, text, rule="other") == ["a1"]

    def test_directive_for_other_rule_does_not_apply(self, engine):
        text = "const a = /a1/; // patchly-ignore-line other\n"
        assert ignored_bodies(engine, text) == []

    def test_rule_token_runs_to_whitespace(self, engine):
        """Any non-space run is the rule, asterisks included."""
        text = "const a = /a1/; // patchly-ignore-line re*dos\n"
        assert ignored_bodies(engine, text, rule="re*dos") == ["a1"]
        assert ignored_bodies(engine, text, rule="re") == []

    def test_block_rule_stops_before_close(self):
        state = parse_directives("/* patchly-disable redos*/ /a/ /* patchly-enable redos*/", rule="redos")
        assert len(state.disabled_blocks) == 1

    def test_line_sets_are_zero_based(self):
        state = parse_directives("x\n// patchly-disable-next-line\ny // patchly-ignore-line redos")
        assert state.disabled_next_lines == {1}
        assert state.disabled_lines == {2}


class TestBlockDirectives:
    """disable/enable regions."""

    def test_block_suppresses_inside_only(self, engine):
        """Literals between the tokens are suppressed; one after enable is not."""
        text = (
            "/* patchly-disable redos */\n"
            "const a = /a1/;\n"
            "const b = /b2/;\n"
            "/* patchly-enable redos */\n"
            "const c = /c3/;\n"
        )
        assert ignored_bodies(engine, text) == ["a1", "b2"]

    def test_region_is_between_tokens(self):
        """The range runs from the end of the open token to the start of the close token."""
        text = "/* patchly-disable redos */ /a/ /* patchly-enable redos */"
        state = parse_directives(text)

        open_end = text.index("*/") + 2
        close_start = text.index("/* patchly-enable")
        assert state.disabled_blocks == [(open_end, close_start)]

    def test_nested_scopes_close_inner_first(self, engine):
        """disable(A) disable(B) enable(B) enable(A): each rule sees its own region."""
        text = (
            "/* patchly-disable A */ /x1/ "
            "/* patchly-disable B */ /y2/ /* patchly-enable B */ "
            "/z3/ /* patchly-enable A */ /w4/"
        )
        assert ignored_bodies(engine, text, rule="A") == ["x1", "y2", "z3"]
        assert ignored_bodies(engine, text, rule="B") == ["y2"]

    def test_close_skips_incompatible_open(self, engine):
        """enable(A) pops A even though B was opened after it."""
        text = (
            "/* patchly-disable A */ /x1/ "
            "/* patchly-disable B */ /y2/ /* patchly-enable A */ "
            "/z3/ /* patchly-enable B */ /w4/"
        )
        assert ignored_bodies(engine, text, rule="A") == ["x1", "y2"]
        assert ignored_bodies(engine, text, rule="B") == ["y2", "z3"]

    def test_unscoped_block_applies_to_every_rule(self, engine):
        text = "/* patchly-disable */ /x1/ /* patchly-enable */ /y2/"
        assert ignored_bodies(engine, text) == ["x1"]
        assert ignored_bodies(engine, text, rule="other") == ["x1"]

    def test_unmatched_close_is_dropped(self):
        state = parse_directives("/* patchly-enable redos */ /x/")
        assert state.disabled_blocks == []

    def test_unclosed_open_suppresses_nothing(self, engine):
        text = "/* patchly-disable redos */\nconst a = /a1/;\n"
        assert ignored_bodies(engine, text) == []


class TestCaching:
    """Per-version state caching."""

    def test_parse_is_cached_for_same_version(self, engine):
        doc = Document("file:///t.js", "// patchly-disable-next-line\n/a/")
        assert engine.parse(doc) is engine.parse(doc)

    def test_version_change_invalidates(self, engine):
        doc = Document("file:///t.js", "const a = /a1/;\n")
        first = engine.parse(doc)

        doc.insert(0, "// patchly-disable-next-line\n")
        second = engine.parse(doc)

        assert second is not first
        assert second.disabled_next_lines == {0}

    def test_cache_keyed_by_rule(self):
        cache = SuppressionCache()
        engine = SuppressionEngine(cache=cache)
        doc = Document("file:///t.js", "/a/")

        engine.parse(doc)
        engine.parse(doc, rule="other")
        assert len(cache) == 2

        engine.clear(doc)
        assert len(cache) == 0


class TestIgnoreNextLine:
    """Inserting disable-next-line directives."""

    def test_inserts_directive_before_line(self, engine):
        doc = Document("file:///t.js", "const a = /a1/;\nconst b = /b2/;")
        engine.parse(doc)

        assert engine.ignore_next_line(doc, 1) is True
        assert doc.text == "const a = /a1/;\n//patchly-disable-next-line redos\nconst b = /b2/;"

        state = engine.parse(doc)
        spans = list(scan_literals(doc.text))
        assert [engine.is_ignored(span, doc, state) for span in spans] == [False, True]

    def test_custom_rule(self, engine):
        doc = Document("file:///t.js", "/a/")
        engine.ignore_next_line(doc, 0, rule="other")
        assert doc.text.startswith("//patchly-disable-next-line other\n")

    def test_line_past_end_appends(self, engine):
        doc = Document("file:///t.js", "/a/")
        assert engine.ignore_next_line(doc, 1) is True
        assert doc.text == "/a/\n" + next_line_directive("redos")

    def test_out_of_range_line_is_rejected(self, engine):
        doc = Document("file:///t.js", "/a/")
        assert engine.ignore_next_line(doc, 5) is False
        assert engine.ignore_next_line(doc, -1) is False
        assert doc.text == "/a/"
        assert doc.version == 1

    def test_directive_insertion_points(self, engine):
        """(offset, prefix) for inside, past-the-end, and out-of-range lines."""
        doc = Document("file:///t.js", "/a/\n/b/")

        assert engine.directive_insertion(doc, 1) == (4, "")
        assert engine.directive_insertion(doc, 2) == (7, "\n")
        assert engine.directive_insertion(doc, 3) is None
        assert engine.directive_insertion(Document("file:///u.js", "/a/\n"), 2) == (4, "")
