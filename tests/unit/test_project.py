"""
Unit tests for the GN project model and snapshot persistence.
"""

import tempfile
from pathlib import Path

import orjson
import pytest

from gn2gyp.config.models import GnTargetType
from gn2gyp.errors import (
    MissingRootTargetError,
    SnapshotError,
    UnknownBuildError,
    UnknownTargetError,
)
from gn2gyp.gn.project import GnBuild, GnProject

TARGET_TC = "//build/toolchain:gcc_like"
HOST_TC = "//build/toolchain:gcc_like_host"


@pytest.fixture
def raw_build():
    """A build with a default-toolchain and a host-toolchain variant of //src:lib."""
    return {
        "//:all": {"deps": ["//src:lib"], "type": "group", "toolchain": TARGET_TC},
        "//src:lib": {
            "deps": [],
            "type": "static_library",
            "toolchain": TARGET_TC,
            "sources": ["//src/lib.cc"],
            "testonly": False,
        },
        f"//src:lib({HOST_TC})": {
            "deps": [],
            "type": "static_library",
            "toolchain": HOST_TC,
            "sources": ["//src/lib_host.cc"],
        },
    }


@pytest.fixture
def temp_dir():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


def test_default_toolchain_from_root_only():
    """A build whose only target is //:all takes that target's toolchain as default."""
    build = GnBuild.from_dict({"//:all": {"type": "group", "toolchain": HOST_TC}})

    assert build.get_default_toolchain() == HOST_TC
    assert build.default_toolchain == HOST_TC


def test_missing_root_target():
    with pytest.raises(MissingRootTargetError):
        GnBuild.from_dict({"//src:lib": {"type": "source_set", "toolchain": TARGET_TC}})


def test_get_target_by_toolchain(raw_build):
    build = GnBuild.from_dict(raw_build)

    default = build.get_target(TARGET_TC, "//src:lib")
    host = build.get_target(HOST_TC, "//src:lib")

    assert default.sources == ["//src/lib.cc"]
    assert host.sources == ["//src/lib_host.cc"]
    assert host.target_type == GnTargetType.STATIC_LIBRARY


def test_get_unknown_target(raw_build):
    build = GnBuild.from_dict(raw_build)

    with pytest.raises(UnknownTargetError):
        build.get_target(TARGET_TC, "//src:missing")
    with pytest.raises(UnknownTargetError):
        build.get_target("//other:toolchain", "//src:lib")


def test_toolchains_and_names(raw_build):
    build = GnBuild.from_dict(raw_build)

    assert build.toolchains == [TARGET_TC, HOST_TC]
    assert "//src:lib" in build
    assert len(build) == 3


def test_unknown_build(raw_build):
    project = GnProject.from_dict({"debug": raw_build})

    with pytest.raises(UnknownBuildError):
        project.get_build("release")
    # UnknownBuildError is also an UnknownTargetError
    with pytest.raises(UnknownTargetError):
        project.get_build("release")


def test_project_target_names_deduplicated(raw_build):
    project = GnProject.from_dict({"debug": raw_build, "release": raw_build})

    assert project.build_names == ["debug", "release"]
    assert project.target_names == list(raw_build.keys())


def test_serialize_round_trip(raw_build):
    """Serializing and deserializing keeps every field, including unmodeled ones."""
    project = GnProject.from_dict({"debug": raw_build})

    restored = GnProject.deserialize(project.serialize())

    assert restored.to_dict() == {"debug": raw_build}
    assert orjson.loads(restored.serialize()) == {"debug": raw_build}


def test_save_and_load(temp_dir, raw_build):
    project = GnProject.from_dict({"debug": raw_build})

    path = project.save(temp_dir / "snapshot" / "all.json")
    loaded = GnProject.load(path)

    assert loaded.to_dict() == project.to_dict()


def test_load_missing_snapshot(temp_dir):
    with pytest.raises(SnapshotError):
        GnProject.load(temp_dir / "missing.json")


@pytest.mark.parametrize(
    "data",
    [
        b"not json",
        b"[]",
        b'{"debug": []}',
        b'{"debug": {"//:all": {"type": "not_a_type", "toolchain": "//tc"}}}',
        b'{"debug": {"//:all": {"type": "group"}}}',
    ],
)
def test_deserialize_invalid(data):
    with pytest.raises(SnapshotError):
        GnProject.deserialize(data)


def test_add_duplicate_build(raw_build):
    project = GnProject()
    project.add_build("debug", GnBuild.from_dict(raw_build))

    with pytest.raises(ValueError):
        project.add_build("debug", GnBuild.from_dict(raw_build))
