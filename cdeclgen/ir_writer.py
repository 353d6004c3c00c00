"""IR to header writer.

This module writes a :class:`~cdeclgen.ir.Header` as a C header, a C++
header, or a Cython ``.pxd`` file, depending on ``config.language``.

Features
--------
* Documentation comments - ``/** ... */`` in C/C++, ``#`` in Cython
* Conditional guards - ``#if defined(...)`` built from ``config.defines``
* Function attributes - prefix/postfix, deprecation, Swift names
* Cython cimports - automatically added for ``libc`` types

Example
-------
::

    from cdeclgen.config import Config
    from cdeclgen.ir_writer import write_header

    text = write_header(header, Config())
"""

from __future__ import (
    annotations,
)

import json
import logging
from typing import (
    Optional,
)

from cdeclgen.cdecl import (
    write_func,
)
from cdeclgen.config import (
    Config,
    Language,
    Layout,
)
from cdeclgen.cython_types import (
    get_cython_module_for_type,
    get_extern_typedef_for_type,
)
from cdeclgen.ir import (
    Cfg,
    CfgAll,
    CfgAny,
    CfgBoolean,
    CfgNamed,
    CfgNot,
    Documentation,
    Function,
    Header,
    Type,
    iter_paths,
    iter_primitives,
)
from cdeclgen.loader import (
    swift_name,
)
from cdeclgen.writer import (
    SourceWriter,
)

logger = logging.getLogger(__name__)

C_INCLUDES = ["stdarg.h", "stdbool.h", "stdint.h", "stdlib.h"]
CXX_INCLUDES = ["cstdarg", "cstdint", "cstdlib"]


class HeaderWriter:
    """Writes IR to C, C++ or Cython.

    :param header: The functions to declare.
    :param config: Output configuration.

    Attributes
    ----------
    INDENT : int
        Indentation of declarations inside a Cython ``cdef extern`` block.
    """

    INDENT = 4

    def __init__(self, header: Header, config: Config) -> None:
        self.header = header
        self.config = config

        # Cython cimport tracking: module -> types
        self.cython_cimports: dict[str, set[str]] = {}
        self.cython_typedefs: set[str] = set()
        if config.language is Language.CYTHON:
            self._collect_cimport_types()

    def _collect_cimport_types(self) -> None:
        """Collect all types that need cimport statements."""
        for func in self.header.functions:
            for ty in [func.ret] + [arg.ty for arg in func.args]:
                self._check_type(ty)

    def _check_type(self, ty: Type) -> None:
        names = [p.to_repr_c(self.config) for p in iter_primitives(ty)]
        names.extend(generic.export_name() for generic in iter_paths(ty))
        for name in names:
            module = get_cython_module_for_type(name)
            if module:
                self.cython_cimports.setdefault(module, set()).add(name)
            elif get_extern_typedef_for_type(name):
                self.cython_typedefs.add(name)

    def write(self) -> str:
        """Convert the header to a string.

        :returns: Complete file content.
        """
        out = SourceWriter(tab_width=self.config.tab_width)
        language = self.config.language

        if language is Language.CYTHON:
            self._write_cython_prologue(out)
        else:
            includes = CXX_INCLUDES if language is Language.CXX else C_INCLUDES
            for include in includes:
                out.write(f"#include <{include}>")
                out.new_line()
            out.new_line()
            if language is Language.CXX:
                out.write('extern "C" {')
                out.new_line()
                out.new_line()

        for i, func in enumerate(self.header.functions):
            if i != 0:
                out.new_line()
            self._write_function(out, func)

        if language is Language.CYTHON:
            if not self.header.functions:
                out.write("pass")
                out.new_line()
            out.pop_tab()
        elif language is Language.CXX:
            if self.header.functions:
                out.new_line()
            out.write('}  // extern "C"')
            out.new_line()

        return out.getvalue()

    def _write_cython_prologue(self, out: SourceWriter) -> None:
        # Cython stdlib cimports (sorted for determinism)
        for module in sorted(self.cython_cimports.keys()):
            types = sorted(self.cython_cimports[module])
            out.write(f"from {module} cimport {', '.join(types)}")
            out.new_line()
        if self.cython_cimports:
            out.new_line()

        if self.cython_typedefs:
            out.write("cdef extern from *:")
            out.new_line()
            out.push_set_spaces(self.INDENT)
            for name in sorted(self.cython_typedefs):
                out.write(get_extern_typedef_for_type(name) or "")
                out.new_line()
            out.pop_tab()
            out.new_line()

        if self.header.path == "*":
            out.write("cdef extern from *:")
        else:
            out.write(f'cdef extern from "{self.header.path}":')
        out.new_line()
        out.push_set_spaces(self.INDENT)

    def _write_documentation(self, out: SourceWriter, doc: Documentation) -> None:
        if doc.is_empty():
            return
        if self.config.language is Language.CYTHON:
            for line in doc.lines:
                out.write(f"# {line}".rstrip())
                out.new_line()
            return
        out.write("/**")
        out.new_line()
        for line in doc.lines:
            out.write(f" * {line}".rstrip())
            out.new_line()
        out.write(" */")
        out.new_line()

    def _condition(self, cfg: Optional[Cfg]) -> Optional[str]:
        """Preprocessor expression for ``cfg``, or None if nothing maps."""
        if cfg is None:
            return None
        if isinstance(cfg, (CfgBoolean, CfgNamed)):
            macro = self.config.defines.get(str(cfg))
            if macro is None:
                logger.warning("Missing `[defines]` entry for `%s` in configuration; the guard is dropped", cfg)
                return None
            return f"defined({macro})"
        if isinstance(cfg, (CfgAny, CfgAll)):
            parts = [c for c in (self._condition(item) for item in cfg.items) if c is not None]
            if not parts:
                return None
            if len(parts) == 1:
                return parts[0]
            joiner = " || " if isinstance(cfg, CfgAny) else " && "
            return f"({joiner.join(parts)})"
        if isinstance(cfg, CfgNot):
            inner = self._condition(cfg.item)
            return f"!{inner}" if inner is not None else None
        raise TypeError(f"unknown cfg variant: {cfg!r}")

    def _write_function(self, out: SourceWriter, func: Function) -> None:
        """Write a function declaration with its documentation and guard."""
        self._write_documentation(out, func.documentation)

        condition = None
        if self.config.language is not Language.CYTHON:
            condition = self._condition(func.cfg)
        if condition is not None:
            out.write(f"#if {condition}")
            out.new_line()

        layout = self.config.function.args
        if layout is Layout.AUTO:
            if not out.try_write(
                lambda measurer: self._write_declaration(measurer, func, Layout.HORIZONTAL),
                self.config.line_length,
            ):
                self._write_declaration(out, func, Layout.VERTICAL)
        else:
            self._write_declaration(out, func, layout)
        out.new_line()

        if condition is not None:
            out.write("#endif")
            out.new_line()

    def _write_declaration(self, out: SourceWriter, func: Function, layout: Layout) -> None:
        config = self.config
        is_cython = config.language is Language.CYTHON

        if config.function.prefix and not is_cython:
            out.write(f"{config.function.prefix} ")

        note = func.annotations.deprecated
        if note is not None and not is_cython:
            if note and config.function.deprecated_with_note:
                out.write(config.function.deprecated_with_note.replace("{}", json.dumps(note)) + " ")
            elif config.function.deprecated:
                out.write(f"{config.function.deprecated} ")

        write_func(out, func, layout, config)

        if is_cython:
            return

        if not func.extern_decl and config.function.postfix:
            out.write(f" {config.function.postfix}")

        if config.function.swift_name_macro:
            name = swift_name(func, config)
            if name is not None:
                out.write(f" {config.function.swift_name_macro}({name})")

        out.write(";")


def write_header(header: Header, config: Config) -> str:
    """Convert a :class:`~cdeclgen.ir.Header` to C, C++ or Cython.

    :param header: The functions to declare.
    :param config: Output configuration.
    :returns: Complete file content.
    """
    writer = HeaderWriter(header, config)
    return writer.write()
