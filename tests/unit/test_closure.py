"""
Unit tests for the dependency closure.
"""

from collections import Counter

import pytest

from gn2gyp.analyzer.closure import ClosureResolver, TargetBuildKey
from gn2gyp.errors import UnknownTargetError
from gn2gyp.gn.project import GnProject

TARGET_TC = "//build/toolchain:gcc_like"
HOST_TC = "//build/toolchain:gcc_like_host"


def _target(type_: str, toolchain: str, deps: list[str] | None = None) -> dict:
    return {"deps": deps or [], "type": type_, "toolchain": toolchain}


@pytest.fixture
def raw_build():
    """
    //:all -> //src:app -> {//src:lib, //tools:gen(host)}
    //tools:gen(host) -> //src:lib        (inherits the host toolchain)
    //src:lib -> //build/bootstrap:gn      (excluded in some tests)
    """
    return {
        "//:all": _target("group", TARGET_TC, ["//src:app"]),
        "//src:app": _target("executable", TARGET_TC, ["//src:lib", f"//tools:gen({HOST_TC})"]),
        "//src:lib": _target("static_library", TARGET_TC, ["//build/bootstrap:gn"]),
        f"//src:lib({HOST_TC})": _target("static_library", HOST_TC, ["//build/bootstrap:gn"]),
        f"//tools:gen({HOST_TC})": _target("executable", HOST_TC, ["//src:lib"]),
        "//build/bootstrap:gn": _target("executable", TARGET_TC),
        f"//build/bootstrap:gn({HOST_TC})": _target("executable", HOST_TC),
        "//src:unreachable": _target("source_set", TARGET_TC),
    }


@pytest.fixture
def project(raw_build):
    return GnProject.from_dict({"debug": raw_build, "release": raw_build})


def test_closure_visits_each_key_once(project):
    closure = ClosureResolver(project).resolve("//:all")

    counts = Counter(closure.keys)
    assert all(count == 1 for count in counts.values())


def test_closure_covers_transitive_deps_per_build(project):
    closure = ClosureResolver(project).resolve("//:all")

    for build in ("debug", "release"):
        keys = {(key.name, key.toolchain) for key in closure.keys if key.build == build}
        assert keys == {
            ("//:all", TARGET_TC),
            ("//src:app", TARGET_TC),
            ("//src:lib", TARGET_TC),
            ("//src:lib", HOST_TC),
            ("//tools:gen", HOST_TC),
            ("//build/bootstrap:gn", TARGET_TC),
            ("//build/bootstrap:gn", HOST_TC),
        }
    assert "//src:unreachable" not in closure.logical_names


def test_unqualified_dependency_inherits_toolchain(project):
    """//tools:gen(host) depends on plain //src:lib, which must be visited as host."""
    closure = ClosureResolver(project).resolve("//:all")

    key = TargetBuildKey(name="//src:lib", build="debug", toolchain=HOST_TC)
    assert key in closure.keys
    assert closure.graph.has_edge(
        TargetBuildKey(name="//tools:gen", build="debug", toolchain=HOST_TC), key
    )


def test_root_seeded_with_default_toolchain(project):
    closure = ClosureResolver(project).resolve("//src:app")

    roots = [key for key in closure.keys if key.name == "//src:app"]
    assert roots == [
        TargetBuildKey(name="//src:app", build="debug", toolchain=TARGET_TC),
        TargetBuildKey(name="//src:app", build="release", toolchain=TARGET_TC),
    ]


def test_excluded_prefixes_never_enqueued(project):
    resolver = ClosureResolver(project, lambda label: label.startswith("//build/bootstrap"))

    closure = resolver.resolve("//:all")

    assert "//build/bootstrap:gn" not in closure.logical_names
    assert "//src:lib" in closure.logical_names


def test_logical_names_deduplicated_in_discovery_order(project):
    closure = ClosureResolver(project).resolve("//:all")

    assert closure.logical_names == [
        "//:all",
        "//src:app",
        "//src:lib",
        "//tools:gen",
        "//build/bootstrap:gn",
    ]


def test_dependency_order_puts_dependencies_first(project):
    closure = ClosureResolver(project).resolve("//:all")

    order = closure.get_dependency_order()

    assert set(order) == set(closure.logical_names)
    assert order.index("//build/bootstrap:gn") < order.index("//src:lib")
    assert order.index("//src:lib") < order.index("//tools:gen")
    assert order.index("//tools:gen") < order.index("//src:app")
    assert order[-1] == "//:all"


def test_keys_for_build(project):
    closure = ClosureResolver(project).resolve("//:all")

    keys = closure.keys_for("//src:lib", "release")
    assert {key.toolchain for key in keys} == {TARGET_TC, HOST_TC}
    assert all(key.build == "release" for key in keys)


def test_keys_for_matches_discovered_keys(project):
    closure = ClosureResolver(project).resolve("//:all")

    for name in closure.logical_names:
        expected = [key for key in closure.keys if key.name == name]
        assert sorted(closure.keys_for(name), key=str) == sorted(expected, key=str)
        for build in ("debug", "release"):
            assert closure.keys_for(name, build) == [
                key for key in expected if key.build == build
            ]
    assert closure.keys_for("//src:unreachable") == []
    assert closure.keys_for("//src:lib", "profile") == []


def test_missing_dependency_raises(raw_build):
    raw_build["//src:app"] = _target("executable", TARGET_TC, ["//src:missing"])
    project = GnProject.from_dict({"debug": raw_build})

    with pytest.raises(UnknownTargetError):
        ClosureResolver(project).resolve("//:all")
