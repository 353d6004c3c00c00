"""Build the function IR from raw signatures and run the per-function passes.

The passes run in a fixed order for each function:

1. :func:`load_function` - load arguments and return type, substitute the
   ``Self`` placeholder.
2. :func:`resolve_declaration_types` - attach struct/union/enum tags.
3. :func:`rename_for_config` - rename arguments, escape reserved words and
   apply the ``ptrs-as-arrays`` annotation.

:func:`load_module` runs all of them for a :class:`~cdeclgen.syntax.RawModule`.
"""

from __future__ import (
    annotations,
)

import dataclasses
import logging
from typing import (
    Any,
    Optional,
    Union,
)

from cdeclgen import (
    reserved,
)
from cdeclgen.config import (
    Config,
    Language,
)
from cdeclgen.ir import (
    SELF,
    VA_LIST,
    AnnotationSet,
    AnnotationValue,
    Array,
    Cfg,
    ConstArgument,
    DeclarationType,
    Documentation,
    FuncPtr,
    Function,
    FunctionArgument,
    GenericArgument,
    GenericPath,
    Header,
    Path,
    Primitive,
    Ptr,
    Type,
    TypeArgument,
    is_primitive_name,
    iter_paths,
    join_cfg,
    replace_self_with,
)
from cdeclgen.rename import (
    IdentifierType,
    RenameRule,
)
from cdeclgen.syntax import (
    RawArray,
    RawConst,
    RawFn,
    RawModule,
    RawNever,
    RawParam,
    RawPath,
    RawPtr,
    RawReceiver,
    RawRef,
    RawSignature,
    RawType,
    RawUnit,
)

logger = logging.getLogger(__name__)

ANNOTATION_PREFIX = "cdeclgen:"

# Wrappers that are written as a non-null pointer to their argument
_NON_NULL_POINTERS = {"NonNull", "Box"}


class LoadError(ValueError):
    """Raised when a signature uses a shape that cannot be expressed in C."""


# =============================================================================
# Types
# =============================================================================


def load_type(raw: RawType) -> Optional[Type]:
    """Load a raw type.

    :returns: The IR type, or None for the unit type.
    :raises LoadError: For types that cannot be used outside a return position.
    """
    if isinstance(raw, RawUnit):
        return None
    if isinstance(raw, RawNever):
        raise LoadError("The never type is only supported as a return type")
    if isinstance(raw, RawRef):
        return Ptr(_load_pointee(raw.inner), is_const=not raw.mutable, is_nullable=False, is_ref=raw.cxx)
    if isinstance(raw, RawPtr):
        return Ptr(_load_pointee(raw.inner), is_const=not raw.mutable, is_nullable=True, is_ref=False)
    if isinstance(raw, RawArray):
        inner = load_type(raw.inner)
        if inner is None:
            raise LoadError("Arrays of the unit type are not supported")
        return Array(inner, raw.length)
    if isinstance(raw, RawFn):
        args: list[tuple[Optional[str], Type]] = []
        for param in raw.params:
            ty = load_type(param.type)
            if ty is None:
                continue
            args.append((_param_name(param, ty), ty))
        ret, never_return = load_output(raw.output)
        return FuncPtr(ret, args, never_return)
    if isinstance(raw, RawPath):
        return _load_path(raw)
    raise TypeError(f"unknown raw type variant: {raw!r}")


def load_output(raw: Optional[RawType]) -> tuple[Type, bool]:
    """Load a return type.

    :returns: ``(type, never_return)``; a missing or unit output is ``void``
        and the never type is ``void`` with ``never_return`` set.
    """
    if raw is None or isinstance(raw, RawUnit):
        return Primitive("void"), False
    if isinstance(raw, RawNever):
        return Primitive("void"), True
    ty = load_type(raw)
    return (ty if ty is not None else Primitive("void")), False


def _load_pointee(raw: RawType) -> Type:
    ty = load_type(raw)
    return ty if ty is not None else Primitive("c_void")


def _load_generic_argument(raw: Union[RawType, RawConst]) -> GenericArgument:
    if isinstance(raw, RawConst):
        return ConstArgument(raw.expr)
    ty = load_type(raw)
    if ty is None:
        raise LoadError("The unit type is not supported as a generic argument")
    return TypeArgument(ty)


def _load_path(raw: RawPath) -> Type:
    generics = [_load_generic_argument(g) for g in raw.generics]

    if len(generics) == 1 and isinstance(generics[0], TypeArgument):
        inner = generics[0].ty
        if raw.name == "Option":
            # Function pointers are always written as nullable.
            if isinstance(inner, Ptr):
                return dataclasses.replace(inner, is_nullable=True)
            if isinstance(inner, FuncPtr):
                return inner
        elif raw.name in _NON_NULL_POINTERS:
            return Ptr(inner, is_const=False, is_nullable=False, is_ref=False)

    if not generics and is_primitive_name(raw.name):
        return Primitive(raw.name)
    return Path(GenericPath(raw.name, generics))


# =============================================================================
# Signatures
# =============================================================================


def _param_name(param: RawParam, ty: Type) -> Optional[str]:
    pattern = param.pattern
    if pattern is None or pattern == "_":
        return None
    if pattern.startswith("r#"):
        pattern = pattern[2:]
    if not pattern.isidentifier():
        raise LoadError(f"Parameter has an unsupported argument name: {param.pattern}")
    if isinstance(ty, Primitive) and ty.name == VA_LIST:
        return None
    return pattern


def _load_receiver(receiver: RawReceiver) -> Type:
    self_ty: Type = Path(GenericPath(SELF))
    if receiver.type is not None:
        explicit = load_type(receiver.type)
        if explicit is not None:
            self_ty = explicit

    if not receiver.reference:
        return self_ty
    return Ptr(self_ty, is_const=not receiver.mutable, is_nullable=False, is_ref=False)


def _load_argument(raw: Union[RawParam, RawReceiver]) -> Optional[FunctionArgument]:
    if isinstance(raw, RawReceiver):
        return FunctionArgument("self", _load_receiver(raw))

    ty = load_type(raw.type)
    if ty is None:
        return None
    name = _param_name(raw, ty)
    if isinstance(ty, Array):
        raise LoadError("Array as function arguments are not supported")
    return FunctionArgument(name, ty)


def load_function(
    path: str,
    self_type_path: Optional[str],
    sig: RawSignature,
    extern_decl: bool = False,
    annotations: Optional[AnnotationSet] = None,
    documentation: Optional[Documentation] = None,
    cfg: Optional[Cfg] = None,
    mod_cfg: Optional[Cfg] = None,
) -> Function:
    """Load a function from its raw signature.

    :param path: Exported function name.
    :param self_type_path: Name of the enclosing type for methods.
    :param sig: The raw signature.
    :param extern_decl: The function is declared in a foreign block.
    :param annotations: Parsed annotations of the function.
    :param documentation: Documentation of the function.
    :param cfg: Guard attached to the function itself.
    :param mod_cfg: Guard of the enclosing module.
    :raises LoadError: If a parameter cannot be expressed in C.
    """
    args: list[FunctionArgument] = []
    for raw_arg in sig.inputs:
        arg = _load_argument(raw_arg)
        if arg is not None:
            args.append(arg)
    if sig.variadic:
        args.append(FunctionArgument(None, Primitive(VA_LIST)))

    ret, never_return = load_output(sig.output)

    if self_type_path is not None:
        for arg in args:
            replace_self_with(arg.ty, self_type_path)
        replace_self_with(ret, self_type_path)

    return Function(
        path=path,
        ret=ret,
        args=args,
        self_type_path=self_type_path,
        extern_decl=extern_decl,
        never_return=never_return,
        cfg=join_cfg(mod_cfg, cfg),
        annotations=annotations if annotations is not None else AnnotationSet(),
        documentation=documentation if documentation is not None else Documentation(),
    )


# =============================================================================
# Annotations
# =============================================================================


def _split_list(text: str) -> list[str]:
    """Split ``a, (b; c), <d, e>`` on top-level commas."""
    items = []
    current = ""
    depth = 0
    for char in text:
        if char in "([<{":
            depth += 1
            current += char
        elif char in ")]>}":
            depth -= 1
            current += char
        elif char == "," and depth == 0:
            items.append(current.strip())
            current = ""
        else:
            current += char
    if current.strip():
        items.append(current.strip())
    return items


def _parse_annotation_value(text: str) -> AnnotationValue:
    text = text.strip()
    if text.startswith("[") and text.endswith("]"):
        return _split_list(text[1:-1])
    if text == "true":
        return True
    if text == "false":
        return False
    return text


def load_annotations(
    doc: list[str],
    explicit: Optional[dict[str, Any]] = None,
    deprecated: Optional[str] = None,
) -> tuple[AnnotationSet, Documentation]:
    """Split doc lines into annotations and documentation.

    Lines of the form ``cdeclgen:key=value`` or ``cdeclgen:key`` are
    annotations; everything else is documentation. ``explicit`` values take
    precedence over annotations found in the doc lines.
    """
    values: dict[str, AnnotationValue] = {}
    lines: list[str] = []
    for line in doc:
        stripped = line.strip()
        if not stripped.startswith(ANNOTATION_PREFIX):
            lines.append(line)
            continue
        body = stripped[len(ANNOTATION_PREFIX) :]
        key, sep, value = body.partition("=")
        key = key.strip()
        if not key:
            logger.warning("Ignoring annotation without a name: %r", line)
            continue
        values[key] = _parse_annotation_value(value) if sep else True

    for key, value in (explicit or {}).items():
        if isinstance(value, (list, tuple)):
            values[key] = [str(v) for v in value]
        elif isinstance(value, bool):
            values[key] = value
        else:
            values[key] = _parse_annotation_value(str(value))

    if deprecated is None and "deprecated" in values:
        note = values["deprecated"]
        deprecated = note if isinstance(note, str) else ""

    return AnnotationSet(values, deprecated), Documentation(lines)


def parse_ptrs_as_arrays(entries: list[str]) -> dict[str, str]:
    """Parse ``(name; length)`` entries into a name -> length mapping.

    Entries that do not split into exactly two parts are skipped with a
    warning.
    """
    ptrs_as_arrays: dict[str, str] = {}
    for entry in entries:
        parts = [part.strip() for part in entry[1:-1].split(";")]
        if len(parts) != 2:
            logger.warning(
                "%r does not follow the correct syntax, so the annotation is being ignored",
                parts,
            )
            continue
        ptrs_as_arrays[parts[0]] = parts[1]
    return ptrs_as_arrays


# =============================================================================
# Passes
# =============================================================================


def resolve_declaration_types(func: Function, resolver: dict[str, DeclarationType]) -> None:
    """Attach declaration-type tags to every named type used by ``func``."""
    types = [func.ret] + [arg.ty for arg in func.args]
    for ty in types:
        for generic in iter_paths(ty):
            ctype = resolver.get(generic.name)
            if ctype is not None:
                generic.ctype = ctype


def rename_for_config(func: Function, config: Config) -> None:
    """Rename argument names, escape reserved words and mark pointer arrays.

    Applying a rename rule clears the array length of every argument, so
    lengths set before this pass do not survive it.
    """
    rule = func.annotations.parse_atom("rename-all", RenameRule.parse)
    if rule is None:
        rule = config.function.rename_args

    if rule.not_none() is not None:
        func.args = [
            FunctionArgument(
                name=rule.apply(arg.name, IdentifierType.FUNCTION_ARG) if arg.name is not None else None,
                ty=arg.ty,
                array_length=None,
            )
            for arg in func.args
        ]

    for arg in func.args:
        if arg.name is not None:
            arg.name = reserved.escape(arg.name)

    entries = func.annotations.list("ptrs-as-arrays")
    if entries is None:
        return
    ptrs_as_arrays = parse_ptrs_as_arrays(entries)
    for arg in func.args:
        if not isinstance(arg.ty, Ptr) or arg.name is None:
            continue
        arg.array_length = ptrs_as_arrays.get(arg.name)


def swift_name(func: Function, config: Config) -> Optional[str]:
    """Name attached with ``function.swift_name_macro``.

    Methods whose name starts with the type name become ``Type.method(a:b:)``
    so Swift associates them with the type; free functions become
    ``function(a:b:)``. Returns None for Cython and when an argument is
    unnamed.
    """
    if config.language is Language.CYTHON:
        return None

    if func.self_type_path is not None:
        type_name = func.self_type_path
        if not func.path.startswith(type_name):
            return func.path
        type_prefix = f"{type_name}."
    else:
        type_name = ""
        type_prefix = ""

    item_name = func.path
    while type_name and item_name.startswith(type_name):
        item_name = item_name[len(type_name) :]
    item_name = item_name.lstrip("_")

    items = []
    for arg in func.args:
        if arg.name is None:
            return None
        items.append(f"{arg.name}:")
    return f"{type_prefix}{item_name}({''.join(items)})"


def load_module(module: RawModule, config: Config) -> Header:
    """Load every function of ``module`` and run all passes.

    Functions that fail to load are logged and left out of the result.
    """
    header = Header(module.header)
    for raw in module.functions:
        annotations, documentation = load_annotations(raw.doc, raw.annotations, raw.deprecated)
        try:
            func = load_function(
                raw.name,
                raw.self_type,
                raw.signature,
                extern_decl=raw.extern,
                annotations=annotations,
                documentation=documentation,
                cfg=raw.cfg,
                mod_cfg=module.cfg,
            )
        except LoadError as exc:
            logger.error("Cannot use fn %s (%s).", raw.name, exc)
            continue
        resolve_declaration_types(func, module.types)
        rename_for_config(func, config)
        header.functions.append(func)
    return header
