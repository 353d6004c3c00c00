"""Tests for decoding JSON function descriptions."""

import pytest

from cdeclgen.ir import (
    CfgAll,
    CfgAny,
    CfgBoolean,
    CfgNamed,
    CfgNot,
    DeclarationType,
)
from cdeclgen.syntax import (
    DecodeError,
    RawArray,
    RawConst,
    RawFn,
    RawNever,
    RawParam,
    RawPath,
    RawPtr,
    RawReceiver,
    RawRef,
    RawUnit,
    decode_cfg,
    decode_function,
    decode_module,
    decode_param,
    decode_type,
)


class TestDecodeType:
    def test_strings(self):
        assert decode_type("u8") == RawPath("u8")
        assert decode_type("()") == RawUnit()
        assert decode_type("!") == RawNever()

    def test_generic_path(self):
        data = {"path": "Array", "generics": ["u8", {"const": 16}]}
        assert decode_type(data) == RawPath("Array", [RawPath("u8"), RawConst("16")])

    def test_reference(self):
        assert decode_type({"ref": "Foo", "mut": True}) == RawRef(RawPath("Foo"), mutable=True)
        assert decode_type({"ref": "Foo", "cxx": True}) == RawRef(RawPath("Foo"), cxx=True)

    def test_pointer(self):
        assert decode_type({"ptr": {"ptr": "c_char"}, "mut": True}) == RawPtr(RawPtr(RawPath("c_char")), mutable=True)

    def test_array(self):
        assert decode_type({"array": "i32", "len": 4}) == RawArray(RawPath("i32"), "4")

    def test_function(self):
        data = {"fn": [{"name": "x", "type": "i32"}, "u8"], "output": "!"}
        assert decode_type(data) == RawFn([RawParam("x", RawPath("i32")), RawParam(None, RawPath("u8"))], RawNever())

    @pytest.mark.parametrize(
        "data",
        [
            "",
            42,
            {"unknown": "x"},
            {"array": "u8"},
            {"fn": [{"self": {}}]},
            {"fn": "u8"},
            {"path": 5},
            {"path": ""},
            {"path": "Vec", "generics": "u8"},
        ],
    )
    def test_invalid(self, data):
        with pytest.raises(DecodeError):
            decode_type(data)


class TestDecodeParam:
    def test_receiver_defaults(self):
        assert decode_param({"self": {}}) == RawReceiver(reference=True, mutable=False)
        assert decode_param({"self": None}) == RawReceiver()

    def test_receiver_by_value(self):
        param = decode_param({"self": {"ref": False, "type": "Handle"}})
        assert param == RawReceiver(reference=False, type=RawPath("Handle"))

    def test_named(self):
        assert decode_param({"name": "n", "type": "usize"}) == RawParam("n", RawPath("usize"))

    def test_unnamed(self):
        assert decode_param({"name": None, "type": "usize"}) == RawParam(None, RawPath("usize"))

    def test_name_must_be_string(self):
        with pytest.raises(DecodeError, match="'name'"):
            decode_param({"name": 5, "type": "i32"})


class TestDecodeCfg:
    def test_forms(self):
        data = {"all": ["unix", {"not": {"feature": "x"}}, {"any": ["a", "b"]}]}
        assert decode_cfg(data) == CfgAll(
            [CfgBoolean("unix"), CfgNot(CfgNamed("feature", "x")), CfgAny([CfgBoolean("a"), CfgBoolean("b")])]
        )

    def test_named_str(self):
        assert str(decode_cfg({"feature": "x"})) == 'feature = "x"'

    def test_invalid(self):
        with pytest.raises(DecodeError):
            decode_cfg({"a": "b", "c": "d"})

    @pytest.mark.parametrize("key", ["any", "all"])
    def test_any_all_require_list(self, key):
        with pytest.raises(DecodeError, match="Expected a list of cfgs"):
            decode_cfg({key: "unix"})


class TestDecodeFunction:
    def test_full(self):
        func = decode_function(
            {
                "name": "foo_len",
                "self_type": "Foo",
                "inputs": [{"self": {}}],
                "output": "usize",
                "doc": "Length.\nMore.",
                "deprecated": True,
                "extern": True,
                "annotations": {"rename-all": "UPPERCASE"},
                "cfg": "unix",
            }
        )
        assert func.name == "foo_len"
        assert func.self_type == "Foo"
        assert func.signature.inputs == [RawReceiver()]
        assert func.signature.output == RawPath("usize")
        assert func.doc == ["Length.", "More."]
        assert func.deprecated == ""
        assert func.extern
        assert func.annotations == {"rename-all": "UPPERCASE"}
        assert func.cfg == CfgBoolean("unix")

    def test_minimal(self):
        func = decode_function({"name": "f"})
        assert func.signature.inputs == []
        assert func.signature.output is None
        assert not func.signature.variadic
        assert func.deprecated is None
        assert func.doc == []

    def test_deprecated_note(self):
        assert decode_function({"name": "f", "deprecated": "use g"}).deprecated == "use g"

    def test_missing_name(self):
        with pytest.raises(DecodeError):
            decode_function({"inputs": []})

    @pytest.mark.parametrize(
        "data",
        [
            {"name": 5},
            {"name": ""},
            {"name": "f", "inputs": {"x": "i32"}},
            {"name": "f", "annotations": ["rename-all"]},
            {"name": "f", "doc": 3},
            {"name": "f", "doc": ["ok", 3]},
            {"name": "f", "self_type": ["Foo"]},
            {"name": "f", "deprecated": 1},
        ],
    )
    def test_wrong_field_types(self, data):
        with pytest.raises(DecodeError):
            decode_function(data)


class TestDecodeModule:
    def test_module(self):
        module = decode_module(
            {
                "header": "lib.h",
                "types": {"Foo": "struct", "Bar": "typedef"},
                "functions": [{"name": "f"}],
                "cfg": "unix",
            }
        )
        assert module.header == "lib.h"
        assert module.types == {"Foo": DeclarationType.STRUCT, "Bar": DeclarationType.TYPEDEF}
        assert [func.name for func in module.functions] == ["f"]
        assert module.cfg == CfgBoolean("unix")

    def test_defaults(self):
        module = decode_module({})
        assert module.header == "*"
        assert module.functions == []

    def test_unknown_declaration_type(self):
        with pytest.raises(DecodeError, match="Unknown declaration type"):
            decode_module({"types": {"Foo": "class"}})

    def test_not_an_object(self):
        with pytest.raises(DecodeError):
            decode_module([])

    @pytest.mark.parametrize(
        "data",
        [
            {"types": ["Foo"]},
            {"functions": {"name": "f"}},
            {"header": 1},
        ],
    )
    def test_wrong_field_types(self, data):
        with pytest.raises(DecodeError, match="wrong type"):
            decode_module(data)
