"""Translate IR types and functions into C declarations.

See section 6.7 (Declarations) of the C standard for background.

A :class:`CDecl` is a type specifier (``const struct Foo``) plus an ordered
list of declarators. The list is ordered from the identifier outwards:
``int (*f)(void)`` is ``[Ptr, Func]`` around the specifier ``int``.

Writing follows the spiral rule: pointer declarators print to the left of
the identifier in reverse order, array and function declarators print to
the right in forward order, and parentheses are inserted where a pointer
would otherwise bind to an array or function declarator.

Example
-------
::

    from cdeclgen.cdecl import write_field
    from cdeclgen.config import Config
    from cdeclgen.ir import Array, Primitive, Ptr
    from cdeclgen.writer import SourceWriter

    out = SourceWriter()
    write_field(out, Ptr(Array(Primitive("i32"), "4")), "table", Config())
    out.getvalue()  # 'int32_t (*table)[4]'
"""

from __future__ import (
    annotations,
)

from dataclasses import (
    dataclass,
    field,
)
from typing import (
    Optional,
    Union,
)

from cdeclgen.config import (
    Config,
    Language,
    Layout,
)
from cdeclgen.ir import (
    Array,
    ConstArgument,
    DeclarationType,
    FuncPtr,
    Function,
    GenericArgument,
    Path,
    Primitive,
    Ptr,
    Type,
    TypeArgument,
)
from cdeclgen.writer import (
    SourceWriter,
)

# =============================================================================
# Declarators
# =============================================================================


@dataclass
class PtrDeclarator:
    """``*`` (or ``&``), optionally followed by ``const`` and an attribute."""

    is_const: bool
    is_nullable: bool
    is_ref: bool


@dataclass
class ArrayDeclarator:
    length: str


@dataclass
class FuncDeclarator:
    """A parameter list.

    :param args: ``(name, decl)`` pairs, each decl owned by this declarator.
    :param layout: How the list is laid out.
    :param never_return: Append the no-return attribute.
    """

    args: list[tuple[Optional[str], CDecl]]
    layout: Layout
    never_return: bool = False


CDeclarator = Union[PtrDeclarator, ArrayDeclarator, FuncDeclarator]


def _is_ptr(declarator: CDeclarator) -> bool:
    # A function declarator groups like a pointer when followed by an array or
    # function declarator.
    return isinstance(declarator, (PtrDeclarator, FuncDeclarator))


# =============================================================================
# Synthesis
# =============================================================================


@dataclass
class CDecl:
    """A C declaration without its identifier.

    The specifier fields (``type_qualifiers``, ``type_name``,
    ``type_generic_args``, ``type_ctype``) are set exactly once, when
    synthesis reaches a :class:`~cdeclgen.ir.Primitive` or
    :class:`~cdeclgen.ir.Path`.
    """

    type_qualifiers: str = ""
    type_name: str = ""
    type_generic_args: list[GenericArgument] = field(default_factory=list)
    type_ctype: Optional[DeclarationType] = None
    declarators: list[CDeclarator] = field(default_factory=list)

    @classmethod
    def from_type(cls, t: Type, config: Config) -> CDecl:
        cdecl = cls()
        cdecl.build_type(t, False, config)
        return cdecl

    @classmethod
    def from_func_arg(cls, t: Type, array_length: Optional[str], config: Config) -> CDecl:
        """Build the declaration of a function argument.

        With an ``array_length`` the pointer argument is written in array
        notation, ``T name[length]``.
        """
        if array_length is None:
            return cls.from_type(t, config)
        assert isinstance(t, Ptr), f"Should never have an array length for a non pointer type {t!r}"
        cdecl = cls()
        cdecl.build_type(Array(t.ty, array_length), t.is_const, config)
        return cdecl

    @classmethod
    def from_func(cls, f: Function, layout: Layout, config: Config) -> CDecl:
        cdecl = cls()
        cdecl.build_func(f, layout, config)
        return cdecl

    def build_func(self, f: Function, layout: Layout, config: Config) -> None:
        args = [(arg.name, CDecl.from_func_arg(arg.ty, arg.array_length, config)) for arg in f.args]
        self.declarators.append(FuncDeclarator(args, layout, f.never_return))
        self.build_type(f.ret, False, config)

    def _set_specifier(self, t: Type, is_const: bool) -> None:
        if is_const:
            assert not self.type_qualifiers, f"error generating cdecl for {t!r}"
            self.type_qualifiers = "const"
        assert not self.type_name, f"error generating cdecl for {t!r}"

    def build_type(self, t: Type, is_const: bool, config: Config) -> None:
        """Append the declarators for ``t`` and set the specifier.

        :param is_const: Whether the enclosing pointer points to const.
        """
        if isinstance(t, Path):
            self._set_specifier(t, is_const)
            self.type_name = t.generic.export_name()
            assert not self.type_generic_args, f"error generating cdecl for {t!r}"
            self.type_generic_args = list(t.generic.generics)
            self.type_ctype = t.generic.ctype
        elif isinstance(t, Primitive):
            self._set_specifier(t, is_const)
            self.type_name = t.to_repr_c(config)
        elif isinstance(t, Ptr):
            self.declarators.append(PtrDeclarator(is_const, t.is_nullable, t.is_ref))
            self.build_type(t.ty, t.is_const, config)
        elif isinstance(t, Array):
            self.declarators.append(ArrayDeclarator(t.length))
            self.build_type(t.ty, is_const, config)
        elif isinstance(t, FuncPtr):
            args = [(name, CDecl.from_type(ty, config)) for name, ty in t.args]
            self.declarators.append(PtrDeclarator(is_const=False, is_nullable=True, is_ref=False))
            self.declarators.append(FuncDeclarator(args, config.function.args, t.never_return))
            self.build_type(t.ret, False, config)
        else:
            raise TypeError(f"unknown type variant: {t!r}")

    # =========================================================================
    # Rendering
    # =========================================================================

    def write(self, out: SourceWriter, ident: Optional[str], config: Config) -> None:
        """Write the declaration, with ``ident`` as the declared name if given."""
        # Type specifier and qualifier
        if self.type_qualifiers:
            out.write(f"{self.type_qualifiers} ")

        if config.language is not Language.CYTHON:
            if self.type_ctype is not None and self.type_ctype.keyword is not None:
                out.write(f"{self.type_ctype.keyword} ")

        out.write(self.type_name)

        if self.type_generic_args:
            out.write("<")
            for i, arg in enumerate(self.type_generic_args):
                if i != 0:
                    out.write(", ")
                if isinstance(arg, TypeArgument):
                    write_type(out, arg.ty, config)
                elif isinstance(arg, ConstArgument):
                    out.write(arg.expr)
                else:
                    raise TypeError(f"unknown generic argument: {arg!r}")
            out.write(">")

        if ident is not None:
            out.write(" ")

        # Left part of the declarators, innermost last
        reversed_declarators = list(reversed(self.declarators))
        for i, declarator in enumerate(reversed_declarators):
            next_is_pointer = i + 1 < len(reversed_declarators) and _is_ptr(reversed_declarators[i + 1])
            if isinstance(declarator, PtrDeclarator):
                out.write("&" if declarator.is_ref else "*")
                if declarator.is_const:
                    out.write("const ")
                if config.language is not Language.CYTHON:
                    attribute = None
                    if not declarator.is_nullable and not declarator.is_ref:
                        attribute = config.pointer.non_null_attribute
                    elif declarator.is_nullable:
                        attribute = config.pointer.nullable_attribute
                    if attribute:
                        out.write(f"{attribute} ")
            elif isinstance(declarator, (ArrayDeclarator, FuncDeclarator)):
                if next_is_pointer:
                    out.write("(")
            else:
                raise TypeError(f"unknown declarator: {declarator!r}")

        if ident is not None:
            out.write(ident)

        # Right part of the declarators, innermost first
        last_was_pointer = False
        for declarator in self.declarators:
            if isinstance(declarator, PtrDeclarator):
                last_was_pointer = True
            elif isinstance(declarator, ArrayDeclarator):
                if last_was_pointer:
                    out.write(")")
                out.write(f"[{declarator.length}]")
                last_was_pointer = False
            elif isinstance(declarator, FuncDeclarator):
                if last_was_pointer:
                    out.write(")")
                out.write("(")
                if not declarator.args and config.language is Language.C:
                    out.write("void")
                _write_args(out, declarator.args, declarator.layout, config)
                out.write(")")
                if declarator.never_return and config.language is not Language.CYTHON:
                    if config.function.no_return:
                        out.write(f" {config.function.no_return}")
                last_was_pointer = True
            else:
                raise TypeError(f"unknown declarator: {declarator!r}")


def _write_horizontal(out: SourceWriter, args: list[tuple[Optional[str], CDecl]], config: Config) -> None:
    for i, (arg_ident, arg_decl) in enumerate(args):
        if i != 0:
            out.write(", ")
        arg_decl.write(out, arg_ident, config)


def _write_vertical(out: SourceWriter, args: list[tuple[Optional[str], CDecl]], config: Config) -> None:
    out.push_set_spaces(out.line_length_for_align())
    for i, (arg_ident, arg_decl) in enumerate(args):
        if i != 0:
            out.write(",")
            out.new_line()
        arg_decl.write(out, arg_ident, config)
    out.pop_tab()


def _write_args(
    out: SourceWriter,
    args: list[tuple[Optional[str], CDecl]],
    layout: Layout,
    config: Config,
) -> None:
    if layout is Layout.VERTICAL:
        _write_vertical(out, args, config)
    elif layout is Layout.HORIZONTAL:
        _write_horizontal(out, args, config)
    elif layout is Layout.AUTO:
        if not out.try_write(lambda measurer: _write_horizontal(measurer, args, config), config.line_length):
            _write_vertical(out, args, config)
    else:
        raise TypeError(f"unknown layout: {layout!r}")


# =============================================================================
# Entry points
# =============================================================================


def write_func(out: SourceWriter, f: Function, layout: Layout, config: Config) -> None:
    """Write the declaration of ``f`` (without trailing ``;``)."""
    CDecl.from_func(f, layout, config).write(out, f.path, config)


def write_field(out: SourceWriter, t: Type, ident: str, config: Config) -> None:
    """Write ``t`` declaring ``ident``, e.g. ``int32_t (*table)[4]``."""
    CDecl.from_type(t, config).write(out, ident, config)


def write_type(out: SourceWriter, t: Type, config: Config) -> None:
    """Write ``t`` as an abstract declarator, e.g. ``int32_t*``."""
    CDecl.from_type(t, config).write(out, None, config)
