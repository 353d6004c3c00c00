import json
import logging
import sys
from importlib.metadata import (
    version as get_version,
)
from typing import (
    IO,
    Any,
)

import click

from .config import (
    Config,
    FunctionConfig,
    Language,
    Layout,
    PointerConfig,
)
from .ir_writer import (
    write_header,
)
from .loader import (
    LoadError,
    load_module,
)
from .rename import (
    RenameRule,
)
from .syntax import (
    DecodeError,
    decode_module,
)
from .validate import (
    ValidationError,
    validate_header,
)

__version__ = get_version("cdeclgen")


def _debug_print(msg: str) -> None:
    """Print debug message to stderr."""
    print(f"[cdeclgen] {msg}", file=sys.stderr)


def translate(
    description: str | dict[str, Any],
    config: Config | None = None,
    validate: bool = False,
    debug: bool = False,
) -> str:
    """Generate declarations from a JSON function description.

    Args:
        description: JSON text, or the already-decoded document. See
            :mod:`cdeclgen.syntax` for the format.
        config: Output configuration; defaults to C with auto layout.
        validate: Parse the generated C with pycparser (C output only).
        debug: Print debug info to stderr.

    Returns:
        Header file contents.

    Raises:
        DecodeError: If the description is malformed.
        ValidationError: If ``validate`` is set and the output does not parse.
    """
    if config is None:
        config = Config()

    if isinstance(description, str):
        try:
            data = json.loads(description)
        except json.JSONDecodeError as exc:
            raise DecodeError(f"Invalid JSON: {exc}") from exc
    else:
        data = description

    module = decode_module(data)
    if debug:
        _debug_print(f"Language: {config.language.value}")
        _debug_print(f"Found {len(module.functions)} functions")

    header = load_module(module, config)
    header.path = config.header if config.header != "*" else module.header

    if debug:
        _debug_print(f"Loaded {len(header.functions)} functions")
        for func in header.functions:
            _debug_print(f"  {func}")

    text = write_header(header, config)

    if validate:
        validate_header(header, text, config)
        if debug:
            _debug_print("Validation passed")

    return text


CONTEXT_SETTINGS: dict[str, list[str]] = dict(help_option_names=["-h", "--help"])


def _parse_defines(defines: tuple[str, ...]) -> dict[str, str]:
    """Parse ``KEY=MACRO`` pairs; the key may itself contain ``=``."""
    result = {}
    for define in defines:
        key, sep, macro = define.rpartition("=")
        if not sep or not key.strip() or not macro.strip():
            click.echo(f"Error: --define expects KEY=MACRO, got {define!r}", err=True)
            raise SystemExit(1)
        result[key.strip()] = macro.strip()
    return result


@click.command(
    context_settings=CONTEXT_SETTINGS,
    help="""Generate C, C++ or Cython declarations from a JSON function description.""",
)
# === General options ===
@click.option("--version", "-v", is_flag=True, help="Print version and exit.")
@click.option(
    "--lang",
    "-l",
    type=click.Choice(["c", "c++", "cython"], case_sensitive=False),
    default="c",
    help="Output language (default: c).",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    help="Suppress warnings.",
)
@click.option(
    "--debug/--no-debug",
    default=False,
    help="Print debug info to stderr.",
)
@click.option(
    "--validate",
    is_flag=True,
    help="Check that the generated C parses (C output only).",
)
# === Layout options ===
@click.option(
    "--args",
    "args_layout",
    type=click.Choice(["auto", "horizontal", "vertical"], case_sensitive=False),
    default="auto",
    help="Argument list layout (default: auto).",
)
@click.option(
    "--line-length",
    type=int,
    default=100,
    metavar="<n>",
    help="Maximum line length for auto layout (default: 100).",
)
@click.option(
    "--tab-width",
    type=int,
    default=2,
    metavar="<n>",
    help="Indentation width (default: 2).",
)
# === Naming options ===
@click.option(
    "--rename-args",
    default="None",
    metavar="<rule>",
    help="Rename rule for argument names (e.g. snake_case, UPPERCASE).",
)
@click.option(
    "--usize-is-size-t",
    is_flag=True,
    help="Write usize/isize as size_t/ptrdiff_t.",
)
# === Attribute options ===
@click.option("--nonnull-attribute", metavar="<attr>", help="Attribute for non-null pointers.")
@click.option("--nullable-attribute", metavar="<attr>", help="Attribute for nullable pointers.")
@click.option("--no-return", metavar="<attr>", help="Attribute for functions that never return.")
@click.option("--prefix", metavar="<text>", help="Text written before each function.")
@click.option("--postfix", metavar="<text>", help="Text written after each non-extern function.")
@click.option("--swift-name-macro", metavar="<macro>", help="Macro attaching Swift names.")
@click.option("--deprecated", metavar="<attr>", help="Attribute for deprecated functions.")
@click.option(
    "--deprecated-with-note",
    metavar="<attr>",
    help="Attribute for deprecated functions with a note; {} is replaced by the note.",
)
@click.option(
    "--define",
    "-D",
    "defines",
    multiple=True,
    metavar="<cfg>=<macro>",
    help="Map a cfg guard to a preprocessor macro.",
)
@click.option(
    "--header",
    metavar="<name>",
    help="Header name for the Cython extern block.",
)
@click.argument(
    "infile",
    type=click.File("r"),
    required=False,
)
@click.argument(
    "outfile",
    type=click.File("w"),
    default="-",
)
def cli(
    version: bool,
    infile: IO[str] | None,
    outfile: IO[str],
    lang: str,
    quiet: bool,
    debug: bool,
    validate: bool,
    args_layout: str,
    line_length: int,
    tab_width: int,
    rename_args: str,
    usize_is_size_t: bool,
    nonnull_attribute: str | None,
    nullable_attribute: str | None,
    no_return: str | None,
    prefix: str | None,
    postfix: str | None,
    swift_name_macro: str | None,
    deprecated: str | None,
    deprecated_with_note: str | None,
    defines: tuple[str, ...],
    header: str | None,
) -> None:
    if version:
        print(__version__)
        return

    # Require infile for translation
    if infile is None:
        click.echo("Error: Missing argument 'INFILE'.", err=True)
        raise SystemExit(2)

    logging.basicConfig(
        level=logging.DEBUG if debug else (logging.ERROR if quiet else logging.WARNING),
        format="[cdeclgen] %(levelname)s: %(message)s",
    )

    language = Language.parse(lang)
    if validate and language is not Language.C:
        click.echo(f"Error: --validate requires C output (got {language.value}).", err=True)
        raise SystemExit(1)

    try:
        rule = RenameRule.parse(rename_args)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc

    config = Config(
        language=language,
        line_length=line_length,
        tab_width=tab_width,
        usize_is_size_t=usize_is_size_t,
        defines=_parse_defines(defines),
        header=header or "*",
        function=FunctionConfig(
            args=Layout(args_layout.lower()),
            rename_args=rule,
            no_return=no_return,
            prefix=prefix,
            postfix=postfix,
            swift_name_macro=swift_name_macro,
            deprecated=deprecated,
            deprecated_with_note=deprecated_with_note,
        ),
        pointer=PointerConfig(
            non_null_attribute=nonnull_attribute,
            nullable_attribute=nullable_attribute,
        ),
    )

    try:
        text = translate(infile.read(), config, validate=validate, debug=debug)
    except (DecodeError, LoadError, ValidationError) as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc

    outfile.write(text)
