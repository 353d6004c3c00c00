"""Tests for identifier rename rules and reserved word escaping."""

import pytest

from cdeclgen import (
    reserved,
)
from cdeclgen.rename import (
    IdentifierType,
    RenameRule,
)


class TestRenameRule:
    @pytest.mark.parametrize(
        "rule, expected",
        [
            (RenameRule.NONE, "buffer_len"),
            (RenameRule.LOWER_CASE, "buffer_len"),
            (RenameRule.UPPER_CASE, "BUFFER_LEN"),
            (RenameRule.PASCAL_CASE, "BufferLen"),
            (RenameRule.CAMEL_CASE, "bufferLen"),
            (RenameRule.SNAKE_CASE, "buffer_len"),
            (RenameRule.SCREAMING_SNAKE_CASE, "BUFFER_LEN"),
            (RenameRule.QUALIFIED_SCREAMING_SNAKE_CASE, "BUFFER_LEN"),
            (RenameRule.GECKO_CASE, "aBufferLen"),
        ],
    )
    def test_function_argument(self, rule, expected):
        assert rule.apply("buffer_len", IdentifierType.FUNCTION_ARG) == expected

    def test_gecko_case_prefix_depends_on_context(self):
        assert RenameRule.GECKO_CASE.apply("size", IdentifierType.STRUCT_MEMBER) == "mSize"
        assert RenameRule.GECKO_CASE.apply("size", IdentifierType.ENUM_VARIANT) == "eSize"
        assert RenameRule.GECKO_CASE.apply("size", IdentifierType.TYPE) == "Size"

    def test_camel_humps_are_word_boundaries(self):
        assert RenameRule.SNAKE_CASE.apply("bufferLen", IdentifierType.FUNCTION_ARG) == "buffer_len"
        assert RenameRule.SNAKE_CASE.apply("HTTPServer", IdentifierType.FUNCTION_ARG) == "http_server"

    def test_empty_is_unchanged(self):
        assert RenameRule.UPPER_CASE.apply("", IdentifierType.FUNCTION_ARG) == ""

    @pytest.mark.parametrize(
        "text, rule",
        [
            ("UPPERCASE", RenameRule.UPPER_CASE),
            ("UpperCase", RenameRule.UPPER_CASE),
            ("snake_case", RenameRule.SNAKE_CASE),
            ("camelCase", RenameRule.CAMEL_CASE),
            ("mGeckoCase", RenameRule.GECKO_CASE),
            ("SCREAMING_SNAKE_CASE", RenameRule.SCREAMING_SNAKE_CASE),
            ("None", RenameRule.NONE),
        ],
    )
    def test_parse(self, text, rule):
        assert RenameRule.parse(text) is rule

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Unrecognized RenameRule"):
            RenameRule.parse("kebab-case")

    def test_not_none(self):
        assert RenameRule.NONE.not_none() is None
        assert RenameRule.UPPER_CASE.not_none() is RenameRule.UPPER_CASE


class TestReserved:
    @pytest.mark.parametrize("name", ["int", "default", "class", "template", "lambda", "cdef", "None"])
    def test_reserved_names_get_underscore(self, name):
        assert reserved.escape(name) == name + "_"

    @pytest.mark.parametrize("name", ["buf", "self", "len", "int_"])
    def test_other_names_are_unchanged(self, name):
        assert reserved.escape(name) == name
