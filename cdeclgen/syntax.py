"""Raw signature model handed over by a front-end.

A front-end that understands the source language describes each exported
function with these nodes; :mod:`cdeclgen.loader` turns them into the
:mod:`cdeclgen.ir`. The nodes mirror source syntax (references, raw
pointers, ``Option``/``NonNull`` wrappers) rather than C concepts.

The same model can be decoded from a JSON document with
:func:`decode_module`::

    {
      "header": "mylib.h",
      "types": {"Foo": "struct"},
      "functions": [
        {
          "name": "foo_len",
          "self_type": "Foo",
          "inputs": [{"self": {"ref": true, "mut": false}}],
          "output": "usize"
        }
      ]
    }

Types are written as a string (a path name, ``"()"`` for unit or ``"!"``
for never) or as an object with one of the keys ``path``, ``ref``, ``ptr``,
``array`` or ``fn``.
"""

from __future__ import (
    annotations,
)

from dataclasses import (
    dataclass,
    field,
)
from typing import (
    Any,
    Optional,
    Union,
)

from cdeclgen.ir import (
    Cfg,
    CfgAll,
    CfgAny,
    CfgBoolean,
    CfgNamed,
    CfgNot,
    DeclarationType,
)


class DecodeError(ValueError):
    """Raised when a JSON description is malformed."""


# =============================================================================
# Raw types
# =============================================================================


@dataclass
class RawPath:
    """A named type with optional generic arguments (``Foo``, ``Option<T>``)."""

    name: str
    generics: list[Union[RawType, RawConst]] = field(default_factory=list)


@dataclass
class RawConst:
    """A constant expression in generic-argument position."""

    expr: str


@dataclass
class RawRef:
    """A reference ``&T`` / ``&mut T``.

    :param cxx: Write as a C++ reference instead of a pointer.
    """

    inner: RawType
    mutable: bool = False
    cxx: bool = False


@dataclass
class RawPtr:
    """A raw pointer ``*const T`` / ``*mut T``."""

    inner: RawType
    mutable: bool = False


@dataclass
class RawArray:
    inner: RawType
    length: str


@dataclass
class RawFn:
    """A function pointer type."""

    params: list[RawParam] = field(default_factory=list)
    output: Optional[RawType] = None


@dataclass
class RawNever:
    """The never type ``!``."""


@dataclass
class RawUnit:
    """The unit type ``()``."""


RawType = Union[RawPath, RawRef, RawPtr, RawArray, RawFn, RawNever, RawUnit]


# =============================================================================
# Raw signatures
# =============================================================================


@dataclass
class RawParam:
    """A typed parameter.

    :param pattern: Binding pattern text; an identifier, ``_``, or anything
        else (rejected by the loader). None is treated as ``_``.
    """

    pattern: Optional[str]
    type: RawType


@dataclass
class RawReceiver:
    """A method receiver (``self``, ``&self``, ``&mut self``, ``self: T``).

    :param reference: Passed by reference.
    :param mutable: Mutable reference.
    :param type: Explicit receiver type, if any.
    """

    reference: bool = True
    mutable: bool = False
    type: Optional[RawType] = None


@dataclass
class RawSignature:
    inputs: list[Union[RawParam, RawReceiver]] = field(default_factory=list)
    output: Optional[RawType] = None
    variadic: bool = False


@dataclass
class RawFunction:
    """An exported function as described by the front-end."""

    name: str
    signature: RawSignature
    self_type: Optional[str] = None
    extern: bool = False
    doc: list[str] = field(default_factory=list)
    annotations: dict[str, Any] = field(default_factory=dict)
    deprecated: Optional[str] = None
    cfg: Optional[Cfg] = None


@dataclass
class RawModule:
    """A set of functions sharing one output header."""

    header: str = "*"
    functions: list[RawFunction] = field(default_factory=list)
    types: dict[str, DeclarationType] = field(default_factory=dict)
    cfg: Optional[Cfg] = None


# =============================================================================
# JSON decoding
# =============================================================================


def _field(data: dict, key: str, kind: Union[type, tuple[type, ...]], default: Any = None) -> Any:
    """Return ``data[key]`` (or ``default``), checking it is an instance of ``kind``.

    :raises DecodeError: If the value has the wrong JSON type.
    """
    value = data.get(key, default)
    if value is default:
        return value
    if not isinstance(value, kind):
        raise DecodeError(f"Field {key!r} has the wrong type: {value!r}")
    return value


def decode_type(data: Any) -> RawType:
    """Decode a JSON type description."""
    if isinstance(data, str):
        if data == "()":
            return RawUnit()
        if data == "!":
            return RawNever()
        if not data:
            raise DecodeError("Empty type name")
        return RawPath(data)

    if not isinstance(data, dict):
        raise DecodeError(f"Expected a type, got {data!r}")

    if "path" in data:
        name = _field(data, "path", str)
        if not name:
            raise DecodeError("Empty type name")
        generics: list[Union[RawType, RawConst]] = []
        for arg in _field(data, "generics", list, []):
            if isinstance(arg, dict) and "const" in arg:
                generics.append(RawConst(str(arg["const"])))
            else:
                generics.append(decode_type(arg))
        return RawPath(name, generics)
    if "ref" in data:
        return RawRef(decode_type(data["ref"]), bool(data.get("mut", False)), bool(data.get("cxx", False)))
    if "ptr" in data:
        return RawPtr(decode_type(data["ptr"]), bool(data.get("mut", False)))
    if "array" in data:
        if "len" not in data:
            raise DecodeError(f"Array type without length: {data!r}")
        return RawArray(decode_type(data["array"]), str(data["len"]))
    if "fn" in data:
        params = [decode_param(p) for p in _field(data, "fn", list, [])]
        for param in params:
            if isinstance(param, RawReceiver):
                raise DecodeError("Function pointer types cannot have a receiver")
        output = data.get("output")
        return RawFn(params, decode_type(output) if output is not None else None)

    raise DecodeError(f"Unrecognized type description: {data!r}")


def decode_param(data: Any) -> Union[RawParam, RawReceiver]:
    """Decode a parameter: ``{"name": ..., "type": ...}``, a bare type, or ``{"self": {...}}``."""
    if isinstance(data, dict) and "self" in data:
        receiver = data["self"] or {}
        if not isinstance(receiver, dict):
            raise DecodeError(f"Expected a receiver description, got {receiver!r}")
        explicit = receiver.get("type")
        return RawReceiver(
            reference=bool(receiver.get("ref", True)),
            mutable=bool(receiver.get("mut", False)),
            type=decode_type(explicit) if explicit is not None else None,
        )
    if isinstance(data, dict) and "type" in data:
        return RawParam(_field(data, "name", str), decode_type(data["type"]))
    return RawParam(None, decode_type(data))


def decode_cfg(data: Any) -> Cfg:
    """Decode a guard: ``"unix"``, ``{"feature": "x"}``, ``{"any"|"all": [...]}``, ``{"not": ...}``."""
    if isinstance(data, str):
        return CfgBoolean(data)
    if isinstance(data, dict) and len(data) == 1:
        ((key, value),) = data.items()
        if key in ("any", "all") and not isinstance(value, list):
            raise DecodeError(f"Expected a list of cfgs for {key!r}, got {value!r}")
        if key == "any":
            return CfgAny([decode_cfg(c) for c in value])
        if key == "all":
            return CfgAll([decode_cfg(c) for c in value])
        if key == "not":
            return CfgNot(decode_cfg(value))
        return CfgNamed(key, str(value))
    raise DecodeError(f"Unrecognized cfg: {data!r}")


def decode_function(data: Any) -> RawFunction:
    if not isinstance(data, dict) or "name" not in data:
        raise DecodeError(f"Expected a function with a name, got {data!r}")

    name = _field(data, "name", str)
    if not name:
        raise DecodeError("Function name is empty")

    output = data.get("output")
    signature = RawSignature(
        inputs=[decode_param(p) for p in _field(data, "inputs", list, [])],
        output=decode_type(output) if output is not None else None,
        variadic=bool(data.get("variadic", False)),
    )

    deprecated = data.get("deprecated")
    if deprecated is True:
        deprecated = ""
    elif deprecated is False:
        deprecated = None
    elif deprecated is not None and not isinstance(deprecated, str):
        raise DecodeError(f"Field 'deprecated' has the wrong type: {deprecated!r}")

    doc = _field(data, "doc", (str, list), [])
    if isinstance(doc, str):
        doc = doc.splitlines()
    elif not all(isinstance(line, str) for line in doc):
        raise DecodeError(f"Field 'doc' must hold strings: {doc!r}")

    return RawFunction(
        name=name,
        signature=signature,
        self_type=_field(data, "self_type", str),
        extern=bool(data.get("extern", False)),
        doc=list(doc),
        annotations=dict(_field(data, "annotations", dict, {})),
        deprecated=deprecated,
        cfg=decode_cfg(data["cfg"]) if "cfg" in data else None,
    )


def decode_module(data: Any) -> RawModule:
    """Decode a whole JSON document into a :class:`RawModule`.

    :raises DecodeError: If the document does not follow the format.
    """
    if not isinstance(data, dict):
        raise DecodeError("Expected a JSON object at top level")

    types: dict[str, DeclarationType] = {}
    for name, kind in _field(data, "types", dict, {}).items():
        try:
            types[name] = DeclarationType(kind)
        except ValueError as exc:
            raise DecodeError(f"Unknown declaration type {kind!r} for {name}") from exc

    return RawModule(
        header=_field(data, "header", str, "*"),
        functions=[decode_function(f) for f in _field(data, "functions", list, [])],
        types=types,
        cfg=decode_cfg(data["cfg"]) if "cfg" in data else None,
    )
