"""Package index: module loading and name resolution."""

from conftest import ROOT_PACKAGE, build_index

from gotestsynth.frontend.packages import Handle, PackageIndex, load_module, module_path
from gotestsynth.ir import Ident, StructType


def write(root, rel: str, text: str) -> None:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)


def test_load_module(tmp_path) -> None:
    write(tmp_path, "go.mod", "module example.com/shop\n\ngo 1.22\n")
    write(tmp_path, "shop.go", "package shop\n\nfunc Buy() {}\n")
    write(tmp_path, "shop_test.go", "package shop\n\nfunc TestBuy() {}\n")
    write(tmp_path, "money/money.go", "package money\n\ntype Amount struct{ Cents int }\n")
    write(tmp_path, "vendor/x/x.go", "package x\n")
    write(tmp_path, "testdata/bad.go", "not go at all")
    index = load_module(tmp_path)
    assert index.root_package == "example.com/shop"
    assert sorted(index.files) == ["money/money.go", "shop.go"]
    assert index.root_files() == ["shop.go"]
    assert index.handle_for("money/money.go") == Handle("example.com/shop/money", "money/money.go")


def test_module_path_without_go_mod(tmp_path) -> None:
    root = tmp_path / "tool"
    root.mkdir()
    assert module_path(root) == "tool"


def test_module_path_quoted(tmp_path) -> None:
    write(tmp_path, "go.mod", 'module "example.com/quoted"\n')
    assert module_path(tmp_path) == "example.com/quoted"


def test_same_package_prefers_own_file() -> None:
    index = build_index(
        {
            "a.go": (ROOT_PACKAGE, "package app\n\ntype T int\n"),
            "b.go": (ROOT_PACKAGE, "package app\n\ntype T string\ntype U bool\n"),
        }
    )
    found, spec, handle = index.find_in_same_package(index.handle_for("b.go"), "T")
    assert found and spec is not None
    assert spec.typ == Ident("string")
    found, spec, handle = index.find_in_same_package(index.handle_for("a.go"), "U")
    assert found
    assert handle == Handle(ROOT_PACKAGE, "b.go")


def test_same_package_miss_returns_original_handle() -> None:
    index = build_index({"a.go": (ROOT_PACKAGE, "package app\n")})
    handle = index.handle_for("a.go")
    assert index.find_in_same_package(handle, "Nope") == (False, None, handle)


def test_import_alias_defaults_to_package_clause() -> None:
    index = build_index(
        {
            "a.go": (ROOT_PACKAGE, 'package app\n\nimport "example.com/lib/v2"\n'),
            "lib/lib.go": ("example.com/lib/v2", "package lib\n\ntype Item struct{ ID int }\n"),
        }
    )
    found, spec, handle = index.find_in_import(index.handle_for("a.go"), "lib", "Item")
    assert found and spec is not None
    assert isinstance(spec.typ, StructType)
    assert handle == Handle("example.com/lib/v2", "lib/lib.go")
    assert not index.find_in_import(index.handle_for("a.go"), "v2", "Item")[0]


def test_explicit_alias() -> None:
    index = build_index(
        {
            "a.go": (ROOT_PACKAGE, 'package app\n\nimport l "example.com/lib"\n'),
            "lib/lib.go": ("example.com/lib", "package lib\n\ntype Item int\n"),
        }
    )
    assert index.find_in_import(index.handle_for("a.go"), "l", "Item")[0]
    assert not index.find_in_import(index.handle_for("a.go"), "lib", "Item")[0]


def test_unindexed_import_falls_back_to_path_base() -> None:
    index = build_index({"a.go": (ROOT_PACKAGE, 'package app\n\nimport "net/http"\n')})
    assert index.find_in_import(index.handle_for("a.go"), "http", "Client") == (False, None, index.handle_for("a.go"))


def test_root_and_package_names() -> None:
    index = PackageIndex(ROOT_PACKAGE)
    root = index.add_file(ROOT_PACKAGE, "a.go", "package app\n")
    other = index.add_file("example.com/app/geo", "geo/geo.go", "package geometry\n")
    assert index.is_root_package(root)
    assert not index.is_root_package(other)
    assert index.package_name_for(other) == "geometry"
    assert index.package_name_for(Handle("example.com/app/unknown", "x.go")) == "unknown"
