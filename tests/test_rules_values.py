"""
Tests for the rules that work on keys, values and elements: placeholders,
stray tokens, key names, scalars, non-ASCII corruption, separators and array
elements.
"""

import json
import time

import pytest

from llm_output_repair.repair.config import RepairConfig, get_repair_config, RepairProfile
from llm_output_repair.repair.diagnostics import DiagnosticsRecorder
from llm_output_repair.repair.engine import apply_group, apply_rule
from llm_output_repair.repair.rules.array_element_rules import (
    KEY_VALUE_PAIR_IN_ARRAY,
    MISSING_OPENING_ELEMENT_QUOTE,
    STRAY_CHAR_BEFORE_OBJECT,
    STRAY_PREFIX_ON_ELEMENT,
)
from llm_output_repair.repair.rules.closure_rules import DANGLING_PROPERTY
from llm_output_repair.repair.rules.key_name_rules import (
    CONCATENATED_KEY_PARTS,
    DUPLICATE_PROPERTY_NAME,
    DUPLICATED_KEY_PREFIX,
    MISSING_OPENING_KEY_QUOTE,
    QUOTE_LIKE_KEY,
    STRAY_WORD_AFTER_COLON,
    TRUNCATED_KEY_FRAGMENT,
    UNQUOTED_KEY,
    KEY_NAME_RULES,
)
from llm_output_repair.repair.rules.non_ascii_rules import (
    CONTROL_ESCAPE_IN_IDENTIFIER,
    GLYPH_AFTER_VALUE,
    GLYPH_BEFORE_VALUE,
    GLYPH_INSIDE_PACKAGE_VALUE,
)
from llm_output_repair.repair.rules.placeholder_rules import PLACEHOLDER_ELEMENT, PLACEHOLDER_VALUE
from llm_output_repair.repair.rules.rule_base import RuleGroup
from llm_output_repair.repair.rules.scalar_rules import (
    ASSIGNMENT_OPERATOR,
    CORRUPTED_NUMERIC_MARKER,
    FOREIGN_LITERAL,
    IDENTIFIER_LED_CONCATENATION,
    IDENTIFIER_ONLY_CONCATENATION,
    LITERAL_CONCATENATION,
    MISSING_OPENING_VALUE_QUOTE,
    SINGLE_QUOTED_VALUE,
    UNDERSCORE_PREFIXED_NUMBER,
    UNQUOTED_STRING_VALUE,
)
from llm_output_repair.repair.rules.separator_rules import (
    MISSING_COLON,
    MISSING_COMMA_AFTER_CONTAINER,
    MISSING_COMMA_AT_LINE_BREAK,
    MISSING_COMMA_BETWEEN_OBJECTS,
    MISSING_COMMA_BETWEEN_STRINGS,
)
from llm_output_repair.repair.rules.stray_token_rules import (
    LIST_MARKER,
    STRAY_CHAR_GLUED_TO_KEY,
    STRAY_TEXT_AFTER_CLOSER,
    STRAY_WORD_BEFORE_KEY,
)


def run_rule(rule, buffer, config=None):
    recorder = DiagnosticsRecorder(max_entries=50)
    return apply_rule(rule, buffer, recorder, config or RepairConfig()), recorder


def assert_untouched(rule, buffer, config=None):
    repaired, recorder = run_rule(rule, buffer, config)
    assert repaired is buffer
    assert recorder.fix_count == 0


class TestPlaceholderRules:
    """Test placeholder token removal"""

    def test_placeholder_element(self):
        repaired, recorder = run_rule(PLACEHOLDER_ELEMENT, '["a", _TODO_, "b"]')
        assert repaired == '["a", "b"]'
        assert recorder.messages() == ("Removed placeholder token _TODO_",)

    def test_placeholder_value(self):
        repaired, _ = run_rule(PLACEHOLDER_VALUE, '{"a": _MISSING_}')
        assert repaired == '{"a": null}'

    def test_placeholder_inside_string_kept(self):
        assert_untouched(PLACEHOLDER_ELEMENT, '["a, _TODO_, b"]')


class TestStrayTokenRules:
    """Test stray words, letters and list markers"""

    def test_stray_word_before_key(self):
        repaired, recorder = run_rule(STRAY_WORD_BEFORE_KEY, '{"a": 1, stray "b": 2}')
        assert repaired == '{"a": 1, "b": 2}'
        assert recorder.messages() == ("Removed stray text before property: stray",)

    def test_keyword_is_not_stray(self):
        assert_untouched(STRAY_WORD_BEFORE_KEY, '{true "b": 2}')

    def test_stray_char_glued_to_key(self):
        repaired, _ = run_rule(STRAY_CHAR_GLUED_TO_KEY, '{"a": 1, x"b": 2}')
        assert repaired == '{"a": 1, "b": 2}'

    def test_list_markers(self):
        repaired, recorder = run_rule(LIST_MARKER, '[\n  - "a",\n  - "b"\n]')
        assert repaired == '[\n  "a",\n  "b"\n]'
        assert recorder.fix_count == 2

    def test_negative_number_is_not_a_marker(self):
        assert_untouched(LIST_MARKER, "[\n  -1,\n  -2\n]")

    def test_stray_text_after_closer(self):
        repaired, _ = run_rule(STRAY_TEXT_AFTER_CLOSER, '[{"a": 1},abc\n{"b": 2}]')
        assert repaired == '[{"a": 1},\n{"b": 2}]'


class TestKeyNameRules:
    """Test property-name normalization"""

    def test_quote_like_key(self):
        repaired, _ = run_rule(QUOTE_LIKE_KEY, "{'name': \"x\"}")
        assert repaired == '{"name": "x"}'

    def test_concatenated_key_parts(self):
        repaired, _ = run_rule(CONCATENATED_KEY_PARTS, '{"na" + "me": "x"}')
        assert repaired == '{"name": "x"}'

    def test_truncated_key_fragment(self):
        repaired, recorder = run_rule(TRUNCATED_KEY_FRAGMENT, '{se": "UserService"}')
        assert repaired == '{"name": "UserService"}'
        assert recorder.messages() == ('Restored truncated property name: se" -> "name"',)

    def test_truncated_key_fragment_disabled_in_strict_profile(self):
        config = get_repair_config(RepairProfile.STRICT)
        assert_untouched(TRUNCATED_KEY_FRAGMENT, '{se": "UserService"}', config)

    def test_unknown_fragment_untouched(self):
        assert_untouched(TRUNCATED_KEY_FRAGMENT, '{zq": "x"}')

    def test_missing_opening_key_quote(self):
        repaired, recorder = run_rule(MISSING_OPENING_KEY_QUOTE, '{name": "foo"}')
        assert repaired == '{"name": "foo"}'
        assert recorder.messages() == ('Fixed missing opening quote on property name: name" -> "name"',)

    def test_unquoted_keys(self):
        repaired, recorder = run_rule(UNQUOTED_KEY, '{name: "foo", count: 2}')
        assert repaired == '{"name": "foo", "count": 2}'
        assert recorder.fix_count == 2

    def test_unquoted_keyword_key_untouched(self):
        assert_untouched(UNQUOTED_KEY, "{true: 1}")

    def test_duplicated_key_prefix(self):
        repaired, recorder = run_rule(DUPLICATED_KEY_PREFIX, '{"namename": "x", "abab": 1}')
        assert repaired == '{"name": "x", "abab": 1}'
        assert recorder.messages() == ("Collapsed duplicated property name: namename -> name",)

    def test_duplicated_key_prefix_scan_stays_linear(self):
        """A long letter run after a quote must not cost quadratic time"""
        buffer = '{"k": "' + "a" * 100000
        start = time.perf_counter()
        assert_untouched(DUPLICATED_KEY_PREFIX, buffer)
        assert time.perf_counter() - start < 1.0

    def test_duplicate_property_name(self):
        repaired, _ = run_rule(DUPLICATE_PROPERTY_NAME, '{"name": "name": "foo"}')
        assert repaired == '{"name": "foo"}'

    def test_stray_word_after_colon(self):
        repaired, _ = run_rule(STRAY_WORD_AFTER_COLON, '{"name": name": "foo"}')
        assert repaired == '{"name": "foo"}'

    def test_key_group_converges(self):
        """Quote parity shifts after each fix; the converging group finishes the job"""
        buffer = "{" + ", ".join(f'k{i}": {i}' for i in range(4)) + "}"
        recorder = DiagnosticsRecorder()
        group = RuleGroup("key_names", KEY_NAME_RULES, converge=True)
        repaired = apply_group(group, buffer, recorder, RepairConfig())
        assert repaired == "{" + ", ".join(f'"k{i}": {i}' for i in range(4)) + "}"
        assert recorder.fix_count == 4


class TestScalarRules:
    """Test corrupted scalar values"""

    def test_corrupted_numeric_marker(self):
        repaired, recorder = run_rule(CORRUPTED_NUMERIC_MARKER, '{"n":_CODE`4, "m": 1}')
        assert repaired == '{"n": 4, "m": 1}'
        assert recorder.messages() == ("Stripped corruption marker from numeric value: 4",)

    def test_underscore_prefixed_number(self):
        repaired, _ = run_rule(UNDERSCORE_PREFIXED_NUMBER, '{"n": _42}')
        assert repaired == '{"n": 42}'

    def test_assignment_operator(self):
        repaired, _ = run_rule(ASSIGNMENT_OPERATOR, '{"a":= 1}')
        assert repaired == '{"a": 1}'

    def test_foreign_literals(self):
        repaired, recorder = run_rule(FOREIGN_LITERAL, '{"a": True, "b": [None, False]}')
        assert repaired == '{"a": true, "b": [null, false]}'
        assert recorder.fix_count == 3

    def test_foreign_literal_inside_string_kept(self):
        assert_untouched(FOREIGN_LITERAL, '{"a": "x, True, y"}')

    def test_single_quoted_value(self):
        repaired, _ = run_rule(SINGLE_QUOTED_VALUE, "{\"a\": 'hello'}")
        assert repaired == '{"a": "hello"}'

    def test_missing_opening_value_quote(self):
        repaired, _ = run_rule(MISSING_OPENING_VALUE_QUOTE, '{"type": class"}')
        assert repaired == '{"type": "class"}'

    def test_unquoted_string_value(self):
        repaired, recorder = run_rule(UNQUOTED_STRING_VALUE, '{"type": class, "ok": true}')
        assert repaired == '{"type": "class", "ok": true}'
        assert recorder.fix_count == 1

    @pytest.mark.parametrize(
        "rule, value",
        [
            (UNQUOTED_STRING_VALUE, 'a": x, b'),
            (MISSING_OPENING_VALUE_QUOTE, 'a": x'),
            (CORRUPTED_NUMERIC_MARKER, 'a": _NUM_4, b'),
            (UNDERSCORE_PREFIXED_NUMBER, 'a": _3}'),
            (ASSIGNMENT_OPERATOR, 'a":= 1'),
            (ASSIGNMENT_OPERATOR, 'a":- x'),
            (FOREIGN_LITERAL, 'a": True}'),
            (SINGLE_QUOTED_VALUE, "a\": 'x'}"),
            (PLACEHOLDER_VALUE, 'a": _TODO_}'),
            (DANGLING_PROPERTY, 'a": }'),
            (IDENTIFIER_ONLY_CONCATENATION, 'a": B + C}'),
            (IDENTIFIER_LED_CONCATENATION, 'a": B + "c"}'),
            (LITERAL_CONCATENATION, 'a": "x" + Y}'),
        ],
    )
    def test_escaped_quote_is_not_a_key(self, rule, value):
        """An escaped quote inside a string never starts a key/value look-alike"""
        assert_untouched(rule, json.dumps({"s": value, "b": 1}))


class TestConcatenationRules:
    """Test value concatenation chains"""

    def test_identifier_led_chain_keeps_literal(self):
        repaired, recorder = run_rule(IDENTIFIER_LED_CONCATENATION, '{"path": BASE_PATH + "/file.ts"}')
        assert repaired == '{"path": "/file.ts"}'
        assert recorder.messages() == ('Dropped identifiers before string literal "/file.ts"',)

    def test_several_leading_identifiers(self):
        repaired, _ = run_rule(IDENTIFIER_LED_CONCATENATION, '{"path": BASE_PATH + DIR + "src/main.ts"}')
        assert repaired == '{"path": "src/main.ts"}'

    def test_trailing_identifier_dropped(self):
        repaired, recorder = run_rule(LITERAL_CONCATENATION, '{"name": "MyClass" + SUFFIX}')
        assert repaired == '{"name": "MyClass"}'
        assert recorder.messages() == ('Collapsed concatenation chain to "MyClass"',)

    def test_literal_chain_merged(self):
        repaired, _ = run_rule(LITERAL_CONCATENATION, '{"a": "x" + "y" + "z", "b": 1}')
        assert repaired == '{"a": "xyz", "b": 1}'

    def test_chain_in_array_element(self):
        repaired, _ = run_rule(LITERAL_CONCATENATION, '["a" + B, "c"]')
        assert repaired == '["a", "c"]'

    def test_identifier_only_chain_becomes_empty_string(self):
        repaired, _ = run_rule(IDENTIFIER_ONLY_CONCATENATION, '{"path": BASE_PATH + DIRECTORY + FILE_NAME}')
        assert repaired == '{"path": ""}'

    @pytest.mark.parametrize("buffer", ['{"a" + "b": 1}', '{"x": 1, "a" + "b": 1}', '{"a": "x + y"}'])
    def test_key_chains_and_strings_left_alone(self, buffer):
        assert_untouched(LITERAL_CONCATENATION, buffer)


class TestNonAsciiRules:
    """Test glyph and escape stripping around identifiers"""

    def test_glyph_inside_package_value(self):
        repaired, _ = run_rule(GLYPH_INSIDE_PACKAGE_VALUE, '{"package": "\u00e2\u20accom.example.app"}')
        assert repaired == '{"package": "com.example.app"}'

    def test_prose_with_glyphs_untouched(self):
        assert_untouched(GLYPH_INSIDE_PACKAGE_VALUE, '{"note": "caf\u00e9 au lait"}')

    def test_glyph_after_value(self):
        repaired, _ = run_rule(GLYPH_AFTER_VALUE, '["java.util.List"\u2122, "x"]')
        assert repaired == '["java.util.List", "x"]'

    def test_glyph_before_value(self):
        repaired, _ = run_rule(GLYPH_BEFORE_VALUE, '["a", \u00a7"util"]')
        assert repaired == '["a", "util"]'

    def test_control_escape_in_identifier(self):
        repaired, _ = run_rule(CONTROL_ESCAPE_IN_IDENTIFIER, '{"import": "java\\u0000.util.List"}')
        assert repaired == '{"import": "java.util.List"}'


class TestSeparatorRules:
    """The same gap means a missing colon in objects and a missing comma in arrays"""

    def test_missing_colon_in_object(self):
        repaired, _ = run_rule(MISSING_COLON, '{"name" "foo"}')
        assert repaired == '{"name": "foo"}'

    def test_missing_colon_not_applied_in_array(self):
        assert_untouched(MISSING_COLON, '["a" "b"]')

    def test_missing_commas_between_strings(self):
        repaired, recorder = run_rule(MISSING_COMMA_BETWEEN_STRINGS, '["a" "b" "c"]')
        assert repaired == '["a", "b", "c"]'
        assert recorder.fix_count == 2

    def test_missing_comma_not_applied_in_object(self):
        assert_untouched(MISSING_COMMA_BETWEEN_STRINGS, '{"a" "b"}')

    @pytest.mark.parametrize(
        "buffer, expected",
        [
            ('{\n  "a": 1\n  "b": 2\n}', '{\n  "a": 1,\n  "b": 2\n}'),
            ('[\n  "a"\n  "b"\n]', '[\n  "a",\n  "b"\n]'),
        ],
    )
    def test_missing_comma_at_line_break(self, buffer, expected):
        repaired, _ = run_rule(MISSING_COMMA_AT_LINE_BREAK, buffer)
        assert repaired == expected

    def test_line_break_inside_string_untouched(self):
        assert_untouched(MISSING_COMMA_AT_LINE_BREAK, '{"a": "1\n2"}')

    def test_missing_comma_after_container(self):
        repaired, _ = run_rule(MISSING_COMMA_AFTER_CONTAINER, '{"a": {"x": 1} "b": 2}')
        assert repaired == '{"a": {"x": 1}, "b": 2}'

    def test_missing_comma_between_objects(self):
        repaired, _ = run_rule(MISSING_COMMA_BETWEEN_OBJECTS, '[{"a": 1} {"b": 2}]')
        assert repaired == '[{"a": 1}, {"b": 2}]'


class TestArrayElementRules:
    """Test array element cleanup"""

    def test_stray_prefix_on_element(self):
        repaired, recorder = run_rule(STRAY_PREFIX_ON_ELEMENT, '{"items": ["x",\n  a"y"]}')
        assert repaired == '{"items": ["x",\n  "y"]}'
        assert recorder.messages() == ("Removed stray prefix 'a' before array element",)

    def test_stray_char_before_object(self):
        repaired, _ = run_rule(STRAY_CHAR_BEFORE_OBJECT, '[{"a": 1}, x{"b": 2}]')
        assert repaired == '[{"a": 1}, {"b": 2}]'

    def test_missing_opening_element_quote(self):
        repaired, _ = run_rule(MISSING_OPENING_ELEMENT_QUOTE, '["a", util"]')
        assert repaired == '["a", "util"]'

    def test_key_value_pair_in_array(self):
        repaired, _ = run_rule(KEY_VALUE_PAIR_IN_ARRAY, '["a", "k": "v"]')
        assert repaired == '["a", "v"]'

    def test_key_value_pair_in_object_untouched(self):
        assert_untouched(KEY_VALUE_PAIR_IN_ARRAY, '{"a": 1, "k": "v"}')
