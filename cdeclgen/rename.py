"""Naming rules applied to generated identifiers.

A :class:`RenameRule` is selected either globally (``function.rename_args``
in :class:`~cdeclgen.config.Config`) or per function through the
``rename-all`` annotation. Source identifiers are expected in
``snake_case`` but camel humps are also recognised as word boundaries.
"""

from __future__ import (
    annotations,
)

import enum
import re

_WORD_RE = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|\d+")


class IdentifierType(enum.Enum):
    """What kind of identifier a rule is being applied to.

    Some rules (``GeckoCase``, ``QualifiedScreamingSnakeCase``) behave
    differently depending on the identifier kind.
    """

    STRUCT_MEMBER = "struct_member"
    ENUM_VARIANT = "enum_variant"
    FUNCTION_ARG = "function_arg"
    TYPE = "type"


def _split_words(text: str) -> list[str]:
    words: list[str] = []
    for chunk in text.split("_"):
        words.extend(_WORD_RE.findall(chunk))
    return words


def _pascal(words: list[str]) -> str:
    return "".join(w[:1].upper() + w[1:].lower() for w in words)


class RenameRule(enum.Enum):
    """A rule for renaming identifiers."""

    NONE = "None"
    GECKO_CASE = "GeckoCase"
    LOWER_CASE = "LowerCase"
    UPPER_CASE = "UpperCase"
    PASCAL_CASE = "PascalCase"
    CAMEL_CASE = "CamelCase"
    SNAKE_CASE = "SnakeCase"
    SCREAMING_SNAKE_CASE = "ScreamingSnakeCase"
    QUALIFIED_SCREAMING_SNAKE_CASE = "QualifiedScreamingSnakeCase"

    @classmethod
    def parse(cls, text: str) -> RenameRule:
        """Parse a rule name, accepting the usual spellings.

        :param text: e.g. ``"UPPERCASE"``, ``"snake_case"``, ``"camelCase"``.
        :raises ValueError: If the name is not a known rule.
        """
        try:
            return _RULE_SPELLINGS[text]
        except KeyError as exc:
            raise ValueError(f"Unrecognized RenameRule: {text!r}") from exc

    def not_none(self) -> RenameRule | None:
        return None if self is RenameRule.NONE else self

    def apply(self, text: str, context: IdentifierType) -> str:
        """Apply this rule to ``text``.

        :param text: The identifier to rename.
        :param context: The kind of identifier being renamed.
        :returns: The renamed identifier. Empty input is returned unchanged.
        """
        if not text or self is RenameRule.NONE:
            return text

        if self is RenameRule.LOWER_CASE:
            return text.lower()
        if self is RenameRule.UPPER_CASE:
            return text.upper()

        words = _split_words(text)
        if self is RenameRule.GECKO_CASE:
            if context is IdentifierType.ENUM_VARIANT:
                return "e" + _pascal(words)
            if context is IdentifierType.FUNCTION_ARG:
                return "a" + _pascal(words)
            if context is IdentifierType.STRUCT_MEMBER:
                return "m" + _pascal(words)
            return _pascal(words)
        if self is RenameRule.PASCAL_CASE:
            return _pascal(words)
        if self is RenameRule.CAMEL_CASE:
            pascal = _pascal(words)
            return pascal[:1].lower() + pascal[1:]
        if self is RenameRule.SNAKE_CASE:
            return "_".join(w.lower() for w in words)
        # Qualification only matters for enum variants, which are
        # prefixed by their enum name elsewhere.
        return "_".join(w.upper() for w in words)


_RULE_SPELLINGS: dict[str, RenameRule] = {
    "none": RenameRule.NONE,
    "None": RenameRule.NONE,
    "GeckoCase": RenameRule.GECKO_CASE,
    "mGeckoCase": RenameRule.GECKO_CASE,
    "gecko_case": RenameRule.GECKO_CASE,
    "LowerCase": RenameRule.LOWER_CASE,
    "lowercase": RenameRule.LOWER_CASE,
    "lower_case": RenameRule.LOWER_CASE,
    "UpperCase": RenameRule.UPPER_CASE,
    "UPPERCASE": RenameRule.UPPER_CASE,
    "upper_case": RenameRule.UPPER_CASE,
    "PascalCase": RenameRule.PASCAL_CASE,
    "pascal_case": RenameRule.PASCAL_CASE,
    "CamelCase": RenameRule.CAMEL_CASE,
    "camelCase": RenameRule.CAMEL_CASE,
    "camel_case": RenameRule.CAMEL_CASE,
    "SnakeCase": RenameRule.SNAKE_CASE,
    "snake_case": RenameRule.SNAKE_CASE,
    "ScreamingSnakeCase": RenameRule.SCREAMING_SNAKE_CASE,
    "SCREAMING_SNAKE_CASE": RenameRule.SCREAMING_SNAKE_CASE,
    "screaming_snake_case": RenameRule.SCREAMING_SNAKE_CASE,
    "QualifiedScreamingSnakeCase": RenameRule.QUALIFIED_SCREAMING_SNAKE_CASE,
    "qualified_screaming_snake_case": RenameRule.QUALIFIED_SCREAMING_SNAKE_CASE,
}
