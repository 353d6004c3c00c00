"""Intermediate Representation (IR) for exported functions and their types.

The loader (:mod:`cdeclgen.loader`) produces this IR from raw signatures and
the declarator code (:mod:`cdeclgen.cdecl`) consumes it to write C, C++ or
Cython declarations.

Design Principles
-----------------
* **Syntax-agnostic**: a signature is modelled independently of how the
  source language spells it.
* **Closed variants**: :data:`Type` is a fixed union of dataclasses. Every
  consumer dispatches over all of them and rejects anything else.
* **Resolved before output**: ``Self`` placeholders, renames and
  declaration-type classification are applied by passes before a type
  reaches the declarator code.

Type Hierarchy
--------------
* :class:`Primitive` - A primitive of the source language (``u8``, ``c_int``)
* :class:`Path` - A named, possibly generic type (``Foo``, ``Vec<u8>``)
* :class:`Ptr` - Pointer or reference to another type
* :class:`Array` - Fixed-length array
* :class:`FuncPtr` - Function pointer

Example
-------
::

    from cdeclgen.ir import Function, FunctionArgument, Primitive, Ptr

    func = Function(
        "buffer_fill",
        ret=Primitive("void"),
        args=[FunctionArgument("buf", Ptr(Primitive("u8"), is_const=False))],
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
    TYPE_CHECKING,
    Callable,
    Iterator,
    Optional,
    TypeVar,
    Union,
)

if TYPE_CHECKING:
    from cdeclgen.config import (
        Config,
    )

# =============================================================================
# Primitives
# =============================================================================

VA_LIST = "VaList"
SELF = "Self"

# Source primitive name -> C spelling
PRIMITIVE_C_NAMES: dict[str, str] = {
    "void": "void",
    "c_void": "void",
    "bool": "bool",
    "char": "uint32_t",
    "c_char": "char",
    "c_schar": "signed char",
    "c_uchar": "unsigned char",
    "c_short": "short",
    "c_ushort": "unsigned short",
    "c_int": "int",
    "c_uint": "unsigned int",
    "c_long": "long",
    "c_ulong": "unsigned long",
    "c_longlong": "long long",
    "c_ulonglong": "unsigned long long",
    "c_float": "float",
    "c_double": "double",
    "u8": "uint8_t",
    "u16": "uint16_t",
    "u32": "uint32_t",
    "u64": "uint64_t",
    "i8": "int8_t",
    "i16": "int16_t",
    "i32": "int32_t",
    "i64": "int64_t",
    "usize": "uintptr_t",
    "isize": "intptr_t",
    "f32": "float",
    "f64": "double",
    "size_t": "size_t",
    "ssize_t": "ssize_t",
    "ptrdiff_t": "ptrdiff_t",
    VA_LIST: "...",
}

_SIZE_T_NAMES = {"usize": "size_t", "isize": "ptrdiff_t"}


def is_primitive_name(name: str) -> bool:
    """Whether ``name`` spells a primitive of the source language."""
    return name in PRIMITIVE_C_NAMES


# =============================================================================
# Declaration types
# =============================================================================


class DeclarationType(enum.Enum):
    """Classification of a named type, controlling its keyword tag.

    ``struct``, ``union`` and ``enum`` types are written with their keyword
    in C (``struct Foo``); a ``typedef`` is written bare.
    """

    STRUCT = "struct"
    UNION = "union"
    ENUM = "enum"
    TYPEDEF = "typedef"

    @property
    def keyword(self) -> Optional[str]:
        if self is DeclarationType.TYPEDEF:
            return None
        return self.value


# =============================================================================
# Type Representations
# =============================================================================


@dataclass
class Primitive:
    """A primitive type of the source language.

    :param name: Source spelling, e.g. ``"u8"`` or ``"c_int"``. Names that
        are not known primitives are written verbatim.
    """

    name: str

    def to_repr_c(self, config: Config) -> str:
        """C spelling of this primitive under ``config``."""
        if config.usize_is_size_t and self.name in _SIZE_T_NAMES:
            return _SIZE_T_NAMES[self.name]
        return PRIMITIVE_C_NAMES.get(self.name, self.name)

    def __str__(self) -> str:
        return self.name


@dataclass
class TypeArgument:
    """A type used as a generic argument."""

    ty: Type

    def __str__(self) -> str:
        return str(self.ty)


@dataclass
class ConstArgument:
    """A constant expression used as a generic argument, kept as text."""

    expr: str

    def __str__(self) -> str:
        return self.expr


GenericArgument = Union[TypeArgument, ConstArgument]


@dataclass
class GenericPath:
    """A type name with its generic arguments and classification.

    :param name: Exported name of the type.
    :param generics: Generic arguments, in order.
    :param ctype: Declaration-type classification, attached by
        :func:`cdeclgen.loader.resolve_declaration_types`.
    """

    name: str
    generics: list[GenericArgument] = field(default_factory=list)
    ctype: Optional[DeclarationType] = None

    def is_self(self) -> bool:
        return self.name == SELF

    def export_name(self) -> str:
        return self.name

    def __str__(self) -> str:
        if self.generics:
            return f"{self.name}<{', '.join(str(g) for g in self.generics)}>"
        return self.name


@dataclass
class Path:
    """A named type."""

    generic: GenericPath

    def __str__(self) -> str:
        return str(self.generic)


@dataclass
class Ptr:
    """Pointer (or C++ reference) to another type.

    :param ty: The pointee.
    :param is_const: Whether the pointee is const (``const T *``).
    :param is_nullable: Whether the pointer may be null; selects the
        nullable or non-null pointer attribute.
    :param is_ref: Write as a C++ reference (``T &``).
    """

    ty: Type
    is_const: bool = False
    is_nullable: bool = True
    is_ref: bool = False

    def __str__(self) -> str:
        sigil = "&" if self.is_ref else "*"
        return f"{sigil}{'const' if self.is_const else 'mut'} {self.ty}"


@dataclass
class Array:
    """Fixed-length array; the length is kept as expression text."""

    ty: Type
    length: str

    def __str__(self) -> str:
        return f"[{self.ty}; {self.length}]"


@dataclass
class FuncPtr:
    """Function pointer.

    :param ret: Return type.
    :param args: ``(name, type)`` pairs; names may be None.
    :param never_return: The function never returns.
    """

    ret: Type
    args: list[tuple[Optional[str], Type]] = field(default_factory=list)
    never_return: bool = False

    def __str__(self) -> str:
        args = ", ".join(f"{name}: {ty}" if name else str(ty) for name, ty in self.args)
        return f"fn({args}) -> {'!' if self.never_return else self.ret}"


# Type alias for any type expression
Type = Union[Primitive, Path, Ptr, Array, FuncPtr]


def iter_paths(ty: Type) -> Iterator[GenericPath]:
    """Yield every :class:`GenericPath` reachable from ``ty``, outermost first."""
    if isinstance(ty, Primitive):
        return
    if isinstance(ty, Path):
        yield ty.generic
        for arg in ty.generic.generics:
            if isinstance(arg, TypeArgument):
                yield from iter_paths(arg.ty)
    elif isinstance(ty, (Ptr, Array)):
        yield from iter_paths(ty.ty)
    elif isinstance(ty, FuncPtr):
        yield from iter_paths(ty.ret)
        for _, arg_ty in ty.args:
            yield from iter_paths(arg_ty)
    else:
        raise TypeError(f"unknown type variant: {ty!r}")


def iter_primitives(ty: Type) -> Iterator[Primitive]:
    """Yield every :class:`Primitive` reachable from ``ty``."""
    if isinstance(ty, Primitive):
        yield ty
    elif isinstance(ty, Path):
        for arg in ty.generic.generics:
            if isinstance(arg, TypeArgument):
                yield from iter_primitives(arg.ty)
    elif isinstance(ty, (Ptr, Array)):
        yield from iter_primitives(ty.ty)
    elif isinstance(ty, FuncPtr):
        yield from iter_primitives(ty.ret)
        for _, arg_ty in ty.args:
            yield from iter_primitives(arg_ty)
    else:
        raise TypeError(f"unknown type variant: {ty!r}")


def replace_self_with(ty: Type, self_path: str) -> None:
    """Rewrite every ``Self`` placeholder in ``ty`` to ``self_path``, in place."""
    for generic in iter_paths(ty):
        if generic.is_self():
            generic.name = self_path


# =============================================================================
# Conditional compilation
# =============================================================================


@dataclass
class CfgBoolean:
    """A bare cfg flag, e.g. ``unix``."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass
class CfgNamed:
    """A key/value cfg predicate, e.g. ``feature = "foo"``."""

    key: str
    value: str

    def __str__(self) -> str:
        return f'{self.key} = "{self.value}"'


@dataclass
class CfgAny:
    items: list[Cfg] = field(default_factory=list)

    def __str__(self) -> str:
        return f"any({', '.join(str(c) for c in self.items)})"


@dataclass
class CfgAll:
    items: list[Cfg] = field(default_factory=list)

    def __str__(self) -> str:
        return f"all({', '.join(str(c) for c in self.items)})"


@dataclass
class CfgNot:
    item: Cfg

    def __str__(self) -> str:
        return f"not({self.item})"


Cfg = Union[CfgBoolean, CfgNamed, CfgAny, CfgAll, CfgNot]


def join_cfg(outer: Optional[Cfg], inner: Optional[Cfg]) -> Optional[Cfg]:
    """Combine an enclosing module guard with an item guard."""
    if outer is None:
        return inner
    if inner is None:
        return outer
    return CfgAll([outer, inner])


# =============================================================================
# Annotations and documentation
# =============================================================================

AnnotationValue = Union[str, list[str], bool]

_T = TypeVar("_T")


@dataclass
class AnnotationSet:
    """Typed annotations attached to an item.

    Values are atoms (``str``), lists of strings, or flags (``bool``).

    :param values: Raw key -> value mapping.
    :param deprecated: Deprecation note; an empty string means deprecated
        without a note, None means not deprecated.
    """

    values: dict[str, AnnotationValue] = field(default_factory=dict)
    deprecated: Optional[str] = None

    def atom(self, name: str) -> Optional[str]:
        value = self.values.get(name)
        return value if isinstance(value, str) else None

    def list(self, name: str) -> Optional[list[str]]:
        value = self.values.get(name)
        return value if isinstance(value, list) else None

    def bool(self, name: str) -> bool:
        return self.values.get(name) is True

    def parse_atom(self, name: str, parser: Callable[[str], _T]) -> Optional[_T]:
        """Parse atom ``name`` with ``parser``; None if absent or invalid."""
        text = self.atom(name)
        if text is None:
            return None
        try:
            return parser(text)
        except ValueError:
            return None


@dataclass
class Documentation:
    """Documentation lines of an item."""

    lines: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.lines


# =============================================================================
# Functions
# =============================================================================


@dataclass
class FunctionArgument:
    """Function argument.

    :param name: Argument name, or None for nameless arguments (``_`` and
        the variadic marker).
    :param ty: Argument type.
    :param array_length: Length text that turns a pointer argument into
        array notation (``T buf[16]``), set by the ``ptrs-as-arrays``
        annotation.
    """

    name: Optional[str]
    ty: Type
    array_length: Optional[str] = None

    def __str__(self) -> str:
        if self.name:
            return f"{self.name}: {self.ty}"
        return str(self.ty)


@dataclass
class Function:
    """Exported function declaration.

    :param path: Exported function name.
    :param ret: Return type.
    :param args: Arguments, with any receiver flattened to a leading ``self``.
    :param self_type_path: Name of the type the function is a method of.
    :param extern_decl: Declared in a foreign block rather than defined.
    :param never_return: The function never returns.
    :param cfg: Conditional-compilation guard.
    :param annotations: Parsed annotations.
    :param documentation: Documentation lines.
    """

    path: str
    ret: Type
    args: list[FunctionArgument] = field(default_factory=list)
    self_type_path: Optional[str] = None
    extern_decl: bool = False
    never_return: bool = False
    cfg: Optional[Cfg] = None
    annotations: AnnotationSet = field(default_factory=AnnotationSet)
    documentation: Documentation = field(default_factory=Documentation)

    def __str__(self) -> str:
        args = ", ".join(str(a) for a in self.args)
        ret = "!" if self.never_return else str(self.ret)
        return f"fn {self.path}({args}) -> {ret}"


# =============================================================================
# Header Container
# =============================================================================


@dataclass
class Header:
    """Container for the functions written to one output header.

    :param path: Header file name.
    :param functions: Functions to declare, in output order.
    """

    path: str
    functions: list[Function] = field(default_factory=list)

    def __str__(self) -> str:
        return f"Header({self.path}, {len(self.functions)} functions)"
