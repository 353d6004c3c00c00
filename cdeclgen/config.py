"""Output configuration.

The configuration is read-only for the whole generation pass. It is
usually built by the CLI from its options, but can be constructed
directly::

    from cdeclgen.config import Config, FunctionConfig, Language, Layout

    config = Config(
        language=Language.C,
        function=FunctionConfig(args=Layout.VERTICAL),
    )
"""

from __future__ import (
    annotations,
)

import enum
from dataclasses import (
    dataclass,
    field,
)
from typing import (
    Optional,
)

from cdeclgen.rename import (
    RenameRule,
)


class Language(enum.Enum):
    """Output language."""

    C = "C"
    CXX = "C++"
    CYTHON = "Cython"

    @classmethod
    def parse(cls, text: str) -> Language:
        normalized = text.strip().lower()
        for language in cls:
            if language.value.lower() == normalized:
                return language
        if normalized in ("cxx", "cpp"):
            return cls.CXX
        raise ValueError(f"Unrecognized Language: {text!r}")


class Layout(enum.Enum):
    """How the argument list of a function declarator is laid out.

    * ``HORIZONTAL`` - all arguments on one line, separated by ``, ``.
    * ``VERTICAL`` - one argument per line, aligned after the ``(``.
    * ``AUTO`` - horizontal if it fits in ``line_length``, else vertical.
    """

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    AUTO = "auto"


@dataclass(frozen=True)
class FunctionConfig:
    """Settings for function declarations.

    :param args: Argument list layout.
    :param rename_args: Default rule for argument names, overridden per
        function by the ``rename-all`` annotation.
    :param no_return: Attribute appended to functions that never return,
        e.g. ``"NORETURN"``.
    :param prefix: Text written before every function declaration.
    :param postfix: Text written after every non-extern function declaration.
    :param swift_name_macro: Macro used to attach a Swift name, e.g.
        ``"CF_SWIFT_NAME"``.
    :param deprecated: Attribute for deprecated functions without a note.
    :param deprecated_with_note: Attribute for deprecated functions with a
        note; ``{}`` is replaced by the quoted note.
    """

    args: Layout = Layout.AUTO
    rename_args: RenameRule = RenameRule.NONE
    no_return: Optional[str] = None
    prefix: Optional[str] = None
    postfix: Optional[str] = None
    swift_name_macro: Optional[str] = None
    deprecated: Optional[str] = None
    deprecated_with_note: Optional[str] = None


@dataclass(frozen=True)
class PointerConfig:
    """Attributes written after ``*`` depending on nullability."""

    non_null_attribute: Optional[str] = None
    nullable_attribute: Optional[str] = None


@dataclass(frozen=True)
class Config:
    """Top-level configuration.

    :param language: Output language.
    :param line_length: Width bound used by :attr:`Layout.AUTO`.
    :param tab_width: Width of one indentation level.
    :param usize_is_size_t: Map ``usize``/``isize`` to ``size_t``/``ptrdiff_t``.
    :param defines: Maps cfg leaves (``unix``, ``feature = "foo"``) to
        preprocessor macro names used in ``#if defined(...)`` guards.
    :param header: Header name used by the Cython ``cdef extern from`` block.
    """

    language: Language = Language.C
    line_length: int = 100
    tab_width: int = 2
    usize_is_size_t: bool = False
    defines: dict[str, str] = field(default_factory=dict)
    header: str = "*"
    function: FunctionConfig = field(default_factory=FunctionConfig)
    pointer: PointerConfig = field(default_factory=PointerConfig)
