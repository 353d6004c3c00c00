"""Syntax check of generated C headers with pycparser.

pycparser does not run a preprocessor, so before parsing the header is
reduced to plain C: comments and preprocessor lines are removed, configured
attribute macros are erased, and the standard and user typedef names are
declared up front.
"""

from __future__ import (
    annotations,
)

import re
from typing import (
    Iterable,
)

from pycparser import (
    c_parser,
)

from cdeclgen.config import (
    Config,
    Language,
)
from cdeclgen.ir import (
    DeclarationType,
    Header,
    iter_paths,
)

STANDARD_TYPEDEFS = [
    "int8_t",
    "int16_t",
    "int32_t",
    "int64_t",
    "uint8_t",
    "uint16_t",
    "uint32_t",
    "uint64_t",
    "intptr_t",
    "uintptr_t",
    "size_t",
    "ssize_t",
    "ptrdiff_t",
    "bool",
]

_COMMENT_RE = re.compile(r"/\*.*?\*/|//[^\n]*", re.DOTALL)


class ValidationError(ValueError):
    """Raised when generated C does not parse."""


def _strip_macro(text: str, macro: str) -> str:
    """Remove every use of ``macro``, including a balanced argument list."""
    pattern = re.compile(rf"(?<![\w]){re.escape(macro)}(?![\w])")
    result = []
    pos = 0
    while True:
        match = pattern.search(text, pos)
        if match is None:
            break
        result.append(text[pos : match.start()])
        end = match.end()
        rest = text[end:]
        stripped = rest.lstrip()
        if stripped.startswith("("):
            end += len(rest) - len(stripped)
            depth = 0
            for i in range(end, len(text)):
                if text[i] == "(":
                    depth += 1
                elif text[i] == ")":
                    depth -= 1
                    if depth == 0:
                        end = i + 1
                        break
        pos = end
    result.append(text[pos:])
    return "".join(result)


def _macro_name(attribute: str) -> str:
    """``CF_SWIFT_NAME`` from ``CF_SWIFT_NAME``; ``DEPRECATED`` from ``DEPRECATED({})``."""
    return attribute.split("(", 1)[0].strip()


def validate_c(
    text: str,
    typedef_names: Iterable[str] = (),
    attributes: Iterable[str] = (),
) -> None:
    """Parse ``text`` as C.

    :param text: Generated header.
    :param typedef_names: Type names used without a ``struct``/``union``/``enum`` tag.
    :param attributes: Attribute macros to erase before parsing.
    :raises ValidationError: If pycparser rejects the header.
    """
    code = _COMMENT_RE.sub("", text)
    code = "\n".join(line for line in code.splitlines() if not line.lstrip().startswith("#"))
    for attribute in attributes:
        name = _macro_name(attribute)
        if name:
            code = _strip_macro(code, name)

    names = list(dict.fromkeys(list(STANDARD_TYPEDEFS) + list(typedef_names)))
    prelude = "".join(f"typedef int {name};\n" for name in names)

    parser = c_parser.CParser()
    try:
        parser.parse(prelude + code, filename="<generated>")
    except c_parser.ParseError as exc:
        raise ValidationError(f"Generated C does not parse: {exc}") from exc


def validate_header(header: Header, text: str, config: Config) -> None:
    """Validate a header written by :func:`cdeclgen.ir_writer.write_header`.

    Only C output can be checked.

    :raises ValueError: If ``config.language`` is not C.
    :raises ValidationError: If the header does not parse.
    """
    if config.language is not Language.C:
        raise ValueError(f"Only C output can be validated, not {config.language.value}")

    typedef_names = set()
    for func in header.functions:
        for ty in [func.ret] + [arg.ty for arg in func.args]:
            for generic in iter_paths(ty):
                if generic.ctype is None or generic.ctype is DeclarationType.TYPEDEF:
                    typedef_names.add(generic.export_name())

    attributes = [
        config.pointer.non_null_attribute,
        config.pointer.nullable_attribute,
        config.function.no_return,
        config.function.prefix,
        config.function.postfix,
        config.function.swift_name_macro,
        config.function.deprecated,
        config.function.deprecated_with_note,
    ]
    validate_c(text, sorted(typedef_names), [a for a in attributes if a])
