"""Tests for resolving segment trees against scopes."""

import io

import pytest

from stencil_core.errors import NoSuchVariableError, ShouldBeIntegerError, WriterError
from stencil_core.parser import parse_template
from stencil_core.render import render, render_to_string
from stencil_core.resolver import is_truthy, resolve_tree, resolve_tree_str
from stencil_core.scope import Scope


class FailingSink:
    """Sink accepting ``limit`` writes, then raising OSError."""

    def __init__(self, limit: int):
        self.limit = limit
        self.written = []

    def write(self, text: str) -> int:
        if len(self.written) >= self.limit:
            raise OSError("disk full")
        self.written.append(text)
        return len(text)


class TestTruthiness:
    @pytest.mark.parametrize("value", ["1", "yes", "00", "false", "x"])
    def test_truthy(self, value):
        assert is_truthy(value)

    @pytest.mark.parametrize("value", ["", "0"])
    def test_falsy(self, value):
        assert not is_truthy(value)


class TestText:
    def test_pure_text_renders_verbatim(self):
        text = "  line one\n\tline two  \n"
        assert render_to_string(text) == text

    def test_empty_template(self):
        assert render_to_string("") == ""


class TestVariables:
    def test_lookup(self):
        assert render_to_string("Hello {{name}}!", {"name": "World"}) == "Hello World!"

    def test_name_is_trimmed(self):
        assert render_to_string("{{  name \n}}", {"name": "x"}) == "x"

    def test_value_is_not_trimmed(self):
        assert render_to_string("[{{x}}]", {"x": " v "}) == "[ v ]"

    def test_computed_name(self):
        variables = {"which": "b", "a_b": "found"}
        assert render_to_string("{{a_{{which}}}}", variables) == "found"

    def test_missing_variable(self):
        with pytest.raises(NoSuchVariableError) as exc_info:
            render_to_string("{{ missing }}")
        assert exc_info.value.name == "missing"
        assert str(exc_info.value) == 'No variable called "missing" in scope'

    def test_non_string_values_are_stringified(self):
        assert render_to_string("{{n}}", {"n": 42}) == "42"


class TestNot:
    @pytest.mark.parametrize(
        "value,expected",
        [("1", "0"), ("abc", "0"), (" 2 ", "0"), ("0", "1"), (" 0 ", "1"), ("", "1"), ("  ", "1")],
    )
    def test_negation(self, value, expected):
        assert render_to_string("{% NOT {{v}} %}", {"v": value}) == expected

    def test_literal_operand(self):
        assert render_to_string("{% NOT 0 %}|{% NOT 1 %}") == "1|0"

    def test_output_usable_as_condition(self):
        template = "{% IF {% NOT {{flag}} %} %}off{%END%}"
        assert render_to_string(template, {"flag": "0"}) == "off"
        assert render_to_string(template, {"flag": "1"}) == ""


class TestIf:
    def test_true(self):
        assert render_to_string("{% IF 1 %}A{%END%}") == "A"

    def test_false(self):
        assert render_to_string("{% IF 0 %}A{%END%}") == ""

    def test_empty_condition(self):
        assert render_to_string("{% IF %}A{%END%}") == ""

    def test_whitespace_condition_is_falsy(self):
        assert render_to_string("{% IF {{v}} %}A{%END%}", {"v": "  0\n"}) == ""

    def test_false_branch_is_not_resolved(self):
        assert render_to_string("{% IF 0 %}{{missing}}{%END%}ok") == "ok"

    def test_indented_block_lines(self):
        template = "list:\n  {% IF 1 %}\n  item\n  {%END%}\ndone\n"
        assert render_to_string(template) == "list:\n  item\ndone\n"


class TestLoop:
    def test_repeats_body(self):
        assert render_to_string("{% LOOP 3 %}x{%END%}") == "xxx"

    def test_zero_count(self):
        assert render_to_string("{% LOOP 0 %}x{%END%}") == ""

    def test_loop_index(self):
        assert render_to_string("{% LOOP 3 %}{{LOOP_INDEX}},{%END%}") == "0,1,2,"

    def test_nested_loop_index_shadows(self):
        template = "{% LOOP 2 %}{% LOOP 2 %}{{LOOP_INDEX}}{%END%}{{LOOP_INDEX}};{%END%}"
        assert render_to_string(template) == "010;011;"

    def test_count_from_variable_is_trimmed(self):
        assert render_to_string("{% LOOP {{n}} %}x{%END%}", {"n": " 2 "}) == "xx"

    def test_plus_sign_accepted(self):
        assert render_to_string("{% LOOP +2 %}x{%END%}") == "xx"

    def test_loop_index_not_visible_after_loop(self):
        with pytest.raises(NoSuchVariableError):
            render_to_string("{% LOOP 1 %}{%END%}{{LOOP_INDEX}}")

    def test_zero_count_does_not_resolve_body(self):
        assert render_to_string("{% LOOP 0 %}{{missing}}{%END%}") == ""

    @pytest.mark.parametrize("count", ["abc", "-1", "1.5", "", "1 2", "0x3"])
    def test_invalid_count(self, count):
        with pytest.raises(ShouldBeIntegerError) as exc_info:
            render_to_string("{% LOOP {{n}} %}x{%END%}", {"n": count})
        assert exc_info.value.text == count.strip()

    def test_invalid_count_message(self):
        with pytest.raises(ShouldBeIntegerError) as exc_info:
            render_to_string("{% LOOP many %}x{%END%}")
        assert str(exc_info.value) == 'Expected an integer, but got "many" instead'

    def test_block_lines_in_loop(self):
        template = "{% LOOP 2 %}\n  - {{LOOP_INDEX}}\n{%END%}\n"
        assert render_to_string(template) == "  - 0\n  - 1\n"


class TestWith:
    def test_bindings_visible_in_body(self):
        assert render_to_string("{% WITH X=1,Y=2 %}{{X}}{{Y}}{%END%}") == "12"

    def test_bindings_not_visible_outside(self):
        with pytest.raises(NoSuchVariableError) as exc_info:
            render_to_string("{% WITH X=1,Y=2 %}{{X}}{{Y}}{%END%}{{X}}")
        assert exc_info.value.name == "X"

    def test_later_assignment_sees_earlier(self):
        assert render_to_string("{% WITH A=1, B={{A}}2 %}{{B}}{%END%}") == "12"

    def test_assignment_does_not_see_itself(self):
        with pytest.raises(NoSuchVariableError):
            render_to_string("{% WITH A={{A}} %}{%END%}")

    def test_reassignment_builds_on_previous(self):
        assert render_to_string("{% WITH A=x, A={{A}}y %}{{A}}{%END%}") == "xy"

    def test_shadows_enclosing_scope(self):
        template = "{% WITH A={{A}}i %}{{A}}{%END%}{{A}}"
        assert render_to_string(template, {"A": "o"}) == "oio"

    def test_value_keeps_spaces(self):
        assert render_to_string("{% WITH X = 1 %}[{{X}}]{%END%}") == "[ 1]"

    def test_computed_name(self):
        assert render_to_string("{% WITH {{n}}=v %}{{K}}{%END%}", {"n": "K"}) == "v"

    def test_resolved_value_is_not_split(self):
        template = "{% WITH X={{v}} %}{{X}}{%END%}"
        assert render_to_string(template, {"v": "a,b=c"}) == "a,b=c"

    def test_with_inside_loop(self):
        template = "{% LOOP 2 %}{% WITH i={{LOOP_INDEX}} %}<{{i}}>{%END%}{%END%}"
        assert render_to_string(template) == "<0><1>"


class TestScopeHandling:
    def test_root_scope_untouched(self):
        scope = Scope({"A": "root"})
        render(io.StringIO(), "{% WITH A=inner %}{% LOOP 1 %}{{A}}{%END%}{%END%}", scope)
        assert scope.lookup("A") == "root"
        assert scope.lookup("LOOP_INDEX") is None

    def test_tree_rendered_against_many_scopes(self):
        tree = parse_template("{{x}}")
        assert resolve_tree_str(tree, Scope({"x": "1"})) == "1"
        assert resolve_tree_str(tree, Scope({"x": "2"})) == "2"

    def test_render_accepts_mapping(self):
        sink = io.StringIO()
        render(sink, "{{a}}", {"a": "b"})
        assert sink.getvalue() == "b"


class TestSinkErrors:
    def test_writer_failure_is_wrapped(self):
        tree = parse_template("a{{x}}c")
        sink = FailingSink(limit=1)
        with pytest.raises(WriterError) as exc_info:
            resolve_tree(sink, tree, Scope({"x": "b"}))
        assert isinstance(exc_info.value.original_error, OSError)
        assert isinstance(exc_info.value.__cause__, OSError)
        assert sink.written == ["a"]

    def test_closed_stream(self):
        sink = io.StringIO()
        sink.close()
        with pytest.raises(WriterError) as exc_info:
            render(sink, "text", {})
        assert str(exc_info.value) == "Error writing to output"
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_bytes_sink_rejects_text(self):
        with pytest.raises(WriterError) as exc_info:
            render(io.BytesIO(), "x", {})
        assert isinstance(exc_info.value.original_error, TypeError)
        assert exc_info.value.detail == str(exc_info.value.original_error)

    def test_partial_output_is_kept(self):
        sink = io.StringIO()
        with pytest.raises(NoSuchVariableError):
            render(sink, "before {{missing}} after", {})
        assert sink.getvalue() == "before "
