"""
Cython type registry for automatic cimport generation.

Maps C type names that can appear in generated declarations to the Cython
module they must be cimported from. Types that Cython knows natively
(``int``, ``size_t``, ``ssize_t``, ...) are not listed.
"""

from __future__ import annotations

# =============================================================================
# Cython Standard Library Registry
# =============================================================================
# Maps C standard library headers to (cython_module, set_of_types)

CYTHON_STDLIB_HEADERS: dict[str, tuple[str, set[str]]] = {
    "stddef.h": (
        "libc.stddef",
        {
            # Note: size_t and ssize_t are Cython built-ins, don't need cimport
            "ptrdiff_t",
            "wchar_t",
        },
    ),
    "stdint.h": (
        "libc.stdint",
        {
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
            "intmax_t",
            "uintmax_t",
        },
    ),
    "stdio.h": (
        "libc.stdio",
        {"FILE", "fpos_t"},
    ),
}

# C types Cython has no spelling for; declared with ``ctypedef`` in a
# ``cdef extern from *`` block instead.
CYTHON_EXTERN_TYPEDEFS: dict[str, str] = {
    "bool": "ctypedef bint bool",
}

# Build reverse lookup: type -> module
_TYPE_TO_CYTHON_MODULE: dict[str, str] = {}
for _header, (_module, _types) in CYTHON_STDLIB_HEADERS.items():
    for _type in _types:
        _TYPE_TO_CYTHON_MODULE[_type] = _module


def get_cython_module_for_type(type_name: str) -> str | None:
    """Get the Cython module that provides a type.

    :param type_name: C type name (e.g., ``"uint32_t"``).
    :returns: Module name (e.g., ``"libc.stdint"``) or None.
    """
    return _TYPE_TO_CYTHON_MODULE.get(type_name)


def get_extern_typedef_for_type(type_name: str) -> str | None:
    """Get the ``ctypedef`` line that declares a type Cython lacks.

    :param type_name: C type name (e.g., ``"bool"``).
    :returns: Declaration line or None.
    """
    return CYTHON_EXTERN_TYPEDEFS.get(type_name)
