"""Reserved words of the output languages.

Identifiers colliding with a C, C++ or Cython keyword are escaped by
appending an underscore, e.g. ``int`` -> ``int_``.
"""

import keyword

C_KEYWORDS = frozenset(
    {
        "auto",
        "break",
        "case",
        "char",
        "const",
        "continue",
        "default",
        "do",
        "double",
        "else",
        "enum",
        "extern",
        "float",
        "for",
        "goto",
        "if",
        "inline",
        "int",
        "long",
        "register",
        "restrict",
        "return",
        "short",
        "signed",
        "sizeof",
        "static",
        "struct",
        "switch",
        "typedef",
        "union",
        "unsigned",
        "void",
        "volatile",
        "while",
        "_Alignas",
        "_Alignof",
        "_Atomic",
        "_Bool",
        "_Complex",
        "_Generic",
        "_Imaginary",
        "_Noreturn",
        "_Static_assert",
        "_Thread_local",
    }
)

CXX_KEYWORDS = frozenset(
    {
        "alignas",
        "alignof",
        "asm",
        "bool",
        "catch",
        "char16_t",
        "char32_t",
        "class",
        "const_cast",
        "constexpr",
        "decltype",
        "delete",
        "dynamic_cast",
        "explicit",
        "export",
        "false",
        "friend",
        "mutable",
        "namespace",
        "new",
        "noexcept",
        "nullptr",
        "operator",
        "private",
        "protected",
        "public",
        "reinterpret_cast",
        "static_assert",
        "static_cast",
        "template",
        "this",
        "thread_local",
        "throw",
        "true",
        "try",
        "typeid",
        "typename",
        "using",
        "virtual",
        "wchar_t",
    }
)

# Cython parses .pxd files as Python, so Python keywords are reserved too.
CYTHON_KEYWORDS = frozenset(keyword.kwlist) | {
    "cdef",
    "cimport",
    "cpdef",
    "ctypedef",
    "DEF",
    "IF",
    "ELIF",
    "ELSE",
    "include",
    "nogil",
    "gil",
    "bint",
}

RESERVED_KEYWORDS = C_KEYWORDS | CXX_KEYWORDS | CYTHON_KEYWORDS


def escape(name: str) -> str:
    """Return ``name`` with an underscore appended if it is reserved."""
    if name in RESERVED_KEYWORDS:
        return name + "_"
    return name
