"""Tests for the IR module."""

import pytest

from cdeclgen.config import (
    Config,
)
from cdeclgen.ir import (
    AnnotationSet,
    Array,
    CfgAll,
    CfgAny,
    CfgBoolean,
    CfgNamed,
    CfgNot,
    ConstArgument,
    DeclarationType,
    Documentation,
    FuncPtr,
    Function,
    FunctionArgument,
    GenericPath,
    Header,
    Path,
    Primitive,
    Ptr,
    TypeArgument,
    is_primitive_name,
    iter_paths,
    iter_primitives,
    join_cfg,
    replace_self_with,
)
from cdeclgen.rename import (
    RenameRule,
)


def path(name, *generics):
    return Path(GenericPath(name, list(generics)))


class TestPrimitive:
    @pytest.mark.parametrize(
        "name, c_name",
        [
            ("u8", "uint8_t"),
            ("i64", "int64_t"),
            ("c_char", "char"),
            ("c_ulong", "unsigned long"),
            ("char", "uint32_t"),
            ("f64", "double"),
            ("bool", "bool"),
            ("c_void", "void"),
            ("isize", "intptr_t"),
            ("VaList", "..."),
        ],
    )
    def test_c_names(self, name, c_name):
        assert Primitive(name).to_repr_c(Config()) == c_name

    def test_unknown_is_verbatim(self):
        assert Primitive("wchar_t").to_repr_c(Config()) == "wchar_t"

    def test_size_t(self):
        config = Config(usize_is_size_t=True)
        assert Primitive("usize").to_repr_c(config) == "size_t"
        assert Primitive("isize").to_repr_c(config) == "ptrdiff_t"
        assert Primitive("u32").to_repr_c(config) == "uint32_t"

    def test_is_primitive_name(self):
        assert is_primitive_name("u8")
        assert not is_primitive_name("Foo")


class TestDeclarationType:
    def test_keyword(self):
        assert DeclarationType.STRUCT.keyword == "struct"
        assert DeclarationType.UNION.keyword == "union"
        assert DeclarationType.ENUM.keyword == "enum"
        assert DeclarationType.TYPEDEF.keyword is None


class TestTypeStr:
    def test_pointer(self):
        assert str(Ptr(Primitive("u8"), is_const=True)) == "*const u8"
        assert str(Ptr(Primitive("u8"), is_ref=True)) == "&mut u8"

    def test_array(self):
        assert str(Array(Primitive("i32"), "4")) == "[i32; 4]"

    def test_generic_path(self):
        assert str(path("Array", TypeArgument(Primitive("u8")), ConstArgument("16"))) == "Array<u8, 16>"

    def test_func_ptr(self):
        assert str(FuncPtr(Primitive("i32"), [("x", Primitive("u8")), (None, Primitive("u8"))])) == "fn(x: u8, u8) -> i32"
        assert str(FuncPtr(Primitive("void"), never_return=True)) == "fn() -> !"

    def test_function(self):
        func = Function("f", Primitive("void"), [FunctionArgument("a", Primitive("i32"))])
        assert str(func) == "fn f(a: i32) -> void"

    def test_header(self):
        assert str(Header("lib.h", [Function("f", Primitive("void"))])) == "Header(lib.h, 1 functions)"


class TestTraversal:
    def test_iter_paths_reaches_nested_generics(self):
        ty = FuncPtr(
            Ptr(path("Vec", TypeArgument(path("Foo")))),
            [("b", Array(path("Bar"), "2")), (None, Primitive("i32"))],
        )
        assert [g.name for g in iter_paths(ty)] == ["Vec", "Foo", "Bar"]

    def test_iter_primitives(self):
        ty = FuncPtr(Primitive("u8"), [("x", path("Vec", TypeArgument(Primitive("i32"))))])
        assert [p.name for p in iter_primitives(ty)] == ["u8", "i32"]

    def test_unknown_variant(self):
        with pytest.raises(TypeError):
            list(iter_paths(object()))

    def test_replace_self_with(self):
        ty = Ptr(path("Option", TypeArgument(path("Self"))))
        replace_self_with(ty, "Foo")
        assert str(ty) == "*mut Option<Foo>"

    def test_replace_self_leaves_other_names(self):
        ty = path("Selfish")
        replace_self_with(ty, "Foo")
        assert str(ty) == "Selfish"


class TestCfg:
    def test_str(self):
        cfg = CfgAll([CfgBoolean("unix"), CfgNot(CfgNamed("feature", "x")), CfgAny([CfgBoolean("a")])])
        assert str(cfg) == 'all(unix, not(feature = "x"), any(a))'

    def test_join(self):
        assert join_cfg(None, None) is None
        assert join_cfg(CfgBoolean("a"), None) == CfgBoolean("a")
        assert join_cfg(None, CfgBoolean("b")) == CfgBoolean("b")
        assert join_cfg(CfgBoolean("a"), CfgBoolean("b")) == CfgAll([CfgBoolean("a"), CfgBoolean("b")])


class TestAnnotationSet:
    def test_accessors(self):
        annotations = AnnotationSet({"atom": "x", "items": ["a", "b"], "flag": True})
        assert annotations.atom("atom") == "x"
        assert annotations.atom("items") is None
        assert annotations.list("items") == ["a", "b"]
        assert annotations.list("atom") is None
        assert annotations.bool("flag")
        assert not annotations.bool("atom")
        assert not annotations.bool("missing")

    def test_parse_atom(self):
        annotations = AnnotationSet({"rename-all": "UPPERCASE", "bad": "nope"})
        assert annotations.parse_atom("rename-all", RenameRule.parse) is RenameRule.UPPER_CASE
        assert annotations.parse_atom("bad", RenameRule.parse) is None
        assert annotations.parse_atom("missing", RenameRule.parse) is None

    def test_documentation(self):
        assert Documentation().is_empty()
        assert not Documentation(["x"]).is_empty()
