"""Tests for the command line interface and the translate() entry point."""

import json

import pytest
from click.testing import CliRunner

from cdeclgen import (
    __version__,
    cli,
    translate,
)
from cdeclgen.config import (
    Config,
    Language,
)
from cdeclgen.syntax import (
    DecodeError,
)

C_PROLOGUE = "#include <stdarg.h>\n#include <stdbool.h>\n#include <stdint.h>\n#include <stdlib.h>\n\n"

DESCRIPTION = {
    "header": "mylib.h",
    "types": {"Foo": "struct"},
    "functions": [
        {
            "name": "foo_len",
            "self_type": "Foo",
            "inputs": [{"self": {}}],
            "output": "usize",
            "doc": "Returns the length.",
        },
        {
            "name": "foo_fill",
            "self_type": "Foo",
            "inputs": [
                {"self": {"mut": True}},
                {"name": "buf", "type": {"ptr": "u8", "mut": True}},
                {"name": "len", "type": "usize"},
            ],
            "cfg": "unix",
        },
    ],
}

FOO_LEN = "/**\n * Returns the length.\n */\nuintptr_t foo_len(const struct Foo *self);\n"


@pytest.fixture
def description_file(tmp_path):
    """A JSON description on disk."""
    path = tmp_path / "mylib.json"
    path.write_text(json.dumps(DESCRIPTION), encoding="utf-8")
    return str(path)


def run(*args):
    return CliRunner().invoke(cli, list(args))


class TestTranslate:
    """Tests for the Python API."""

    def test_json_text(self):
        expected = C_PROLOGUE + FOO_LEN + "\nvoid foo_fill(struct Foo *self, uint8_t *buf, uintptr_t len);\n"
        assert translate(json.dumps(DESCRIPTION)) == expected

    def test_decoded_document(self):
        assert translate(DESCRIPTION) == translate(json.dumps(DESCRIPTION))

    def test_invalid_json(self):
        with pytest.raises(DecodeError, match="Invalid JSON"):
            translate("{not json")

    def test_header_override(self):
        text = translate(DESCRIPTION, Config(language=Language.CYTHON, header="other.h"))
        assert 'cdef extern from "other.h":' in text.splitlines()

    def test_header_from_description(self):
        text = translate(DESCRIPTION, Config(language=Language.CYTHON))
        assert 'cdef extern from "mylib.h":' in text.splitlines()

    def test_validate(self):
        translate(DESCRIPTION, validate=True)

    def test_ptrs_as_arrays_annotation(self):
        description = {
            "functions": [
                {
                    "name": "f",
                    "inputs": [{"name": "buf", "type": {"ptr": "u8", "mut": True}}],
                    "annotations": {"ptrs-as-arrays": "[(buf; 16)]"},
                }
            ]
        }
        assert translate(description) == C_PROLOGUE + "void f(uint8_t buf[16]);\n"

    def test_cython_without_header(self):
        description = {"functions": [{"name": "f"}]}
        text = translate(description, Config(language=Language.CYTHON))
        assert text == "cdef extern from *:\n    void f()\n"

    def test_debug_output(self, capsys):
        translate(DESCRIPTION, debug=True)
        err = capsys.readouterr().err
        assert "[cdeclgen] Found 2 functions" in err
        assert "[cdeclgen] Loaded 2 functions" in err


class TestCli:
    """Tests for the cdeclgen command."""

    def test_c_output(self, description_file):
        result = run(description_file)
        assert result.exit_code == 0, result.output
        assert C_PROLOGUE + FOO_LEN in result.output

    def test_output_file(self, description_file, tmp_path):
        outfile = tmp_path / "mylib.h"
        result = run(description_file, str(outfile))
        assert result.exit_code == 0, result.output
        assert outfile.read_text(encoding="utf-8") == translate(DESCRIPTION)

    def test_define(self, description_file):
        result = run("-D", "unix=DEFINE_UNIX", description_file)
        assert result.exit_code == 0, result.output
        assert result.output.endswith(
            "#if defined(DEFINE_UNIX)\nvoid foo_fill(struct Foo *self, uint8_t *buf, uintptr_t len);\n#endif\n"
        )

    def test_cython(self, description_file):
        result = run("--lang", "cython", "--header", "lib.h", description_file)
        assert result.exit_code == 0, result.output
        assert result.output == (
            "from libc.stdint cimport uint8_t, uintptr_t\n"
            "\n"
            'cdef extern from "lib.h":\n'
            "    # Returns the length.\n"
            "    uintptr_t foo_len(const Foo *self)\n"
            "\n"
            "    void foo_fill(Foo *self, uint8_t *buf, uintptr_t len)\n"
        )

    def test_cxx(self, description_file):
        result = run("-l", "c++", description_file)
        assert result.exit_code == 0, result.output
        assert result.output.endswith('}  // extern "C"\n')

    def test_vertical_args(self, description_file):
        result = run("--args", "vertical", description_file)
        assert result.exit_code == 0, result.output
        assert result.output.endswith(
            "void foo_fill(struct Foo *self,\n              uint8_t *buf,\n              uintptr_t len);\n"
        )

    def test_rename_args(self, description_file):
        result = run("--rename-args", "UPPERCASE", description_file)
        assert result.exit_code == 0, result.output
        assert result.output.endswith("void foo_fill(struct Foo *SELF, uint8_t *BUF, uintptr_t LEN);\n")

    def test_attributes(self, description_file):
        result = run("--nonnull-attribute", "NONNULL", "--nullable-attribute", "NULLABLE", description_file)
        assert result.exit_code == 0, result.output
        assert "uintptr_t foo_len(const struct Foo *NONNULL self);" in result.output.splitlines()

    def test_validate(self, description_file):
        result = run("--validate", description_file)
        assert result.exit_code == 0, result.output

    def test_version(self):
        result = run("--version")
        assert result.exit_code == 0
        assert result.output.strip() == __version__

    def test_missing_infile(self):
        result = run()
        assert result.exit_code == 2
        assert "Missing argument 'INFILE'" in result.output

    def test_validate_requires_c(self, description_file):
        result = run("--validate", "--lang", "cython", description_file)
        assert result.exit_code == 1
        assert "--validate requires C output" in result.output

    def test_unknown_rename_rule(self, description_file):
        result = run("--rename-args", "kebab-case", description_file)
        assert result.exit_code == 1
        assert "Unrecognized RenameRule" in result.output

    def test_bad_define(self, description_file):
        result = run("-D", "unix", description_file)
        assert result.exit_code == 1
        assert "--define expects KEY=MACRO" in result.output

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{", encoding="utf-8")
        result = run(str(path))
        assert result.exit_code == 1
        assert "Error: Invalid JSON" in result.output

    def test_unknown_language(self, description_file):
        result = run("--lang", "rust", description_file)
        assert result.exit_code == 2

    def test_malformed_description(self, tmp_path):
        path = tmp_path / "bad.json"
        description = {"functions": [{"name": "f", "inputs": [{"name": 5, "type": "i32"}]}]}
        path.write_text(json.dumps(description), encoding="utf-8")
        result = run(str(path))
        assert result.exit_code == 1
        assert "Error: Field 'name' has the wrong type" in result.output
