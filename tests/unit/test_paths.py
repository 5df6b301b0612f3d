"""
Unit tests for GN -> GYP path and flag rewriting.
"""

import pytest

from gn2gyp.config.loader import ConfigurationError
from gn2gyp.errors import MalformedFlagsError, UnexpectedPathError
from gn2gyp.translator.paths import (
    PathRewriter,
    correct_script_args_by_table,
    extract_include_dirs,
    passthrough_script_args,
    strip_parent_dir,
)


@pytest.fixture
def rewrite():
    return PathRewriter()


def test_generated_path_uses_shared_intermediate_dir(rewrite):
    assert rewrite("debug", "//out/debug/gen/x.h") == "<(SHARED_INTERMEDIATE_DIR)/gen/x.h"


def test_source_path_uses_project_root(rewrite):
    assert rewrite("debug", "//foo/bar.cc") == "../foo/bar.cc"


def test_other_build_output_is_a_source_path(rewrite):
    """Only the current build's out directory is treated as generated."""
    assert rewrite("debug", "//out/release/gen/x.h") == "../out/release/gen/x.h"


@pytest.mark.parametrize("path", ["foo/bar.cc", "/usr/include/stdio.h", "../foo.cc", ""])
def test_unexpected_paths(rewrite, path):
    with pytest.raises(UnexpectedPathError):
        rewrite("debug", path)


def test_custom_tokens():
    rewrite = PathRewriter(shared_intermediate_token="$(GEN)/", project_root_token="<(DEPTH)/")

    assert rewrite("mac", "//out/mac/a.h") == "$(GEN)/a.h"
    assert rewrite("mac", "//src/a.cc") == "<(DEPTH)/src/a.cc"


def test_extract_include_dirs():
    flags = ["-Wall", "-I", "../../include", "-O2", "-isystem", "../../third_party/x"]

    assert extract_include_dirs(flags) == ["../include", "../third_party/x"]


def test_extract_joined_include_flag():
    assert extract_include_dirs(["-I../../include"]) == ["../include"]


@pytest.mark.parametrize(
    "flag,directory",
    [
        ("-isystem/usr/include", "/usr/include"),
        ("-iquote../../src", "../src"),
        ("-idirafter../../late", "../late"),
    ],
)
def test_extract_joined_i_flags(flag, directory):
    assert extract_include_dirs([flag, "-DFOO"]) == [directory]


def test_separate_iquote_takes_next_token():
    assert extract_include_dirs(["-iquote", "../../src", "-DFOO"]) == ["../src"]


def test_extract_include_dirs_custom_correction():
    assert extract_include_dirs(["-I", "../../a"], correct=lambda p: p) == ["../../a"]


def test_include_flag_as_last_token():
    with pytest.raises(MalformedFlagsError):
        extract_include_dirs(["-O2", "-isystem"])


def test_no_include_flags():
    assert extract_include_dirs(["-O2", "-fPIC"]) == []


def test_strip_parent_dir():
    assert strip_parent_dir("../../foo") == "../foo"
    assert strip_parent_dir("foo") == "foo"


def test_passthrough_script_args():
    args = ["--out", "gen/x"]
    result = passthrough_script_args("//tools/gen.py", args)

    assert result == args
    assert result is not args


def test_correct_script_args_by_table():
    correct = correct_script_args_by_table(
        {"//tools/gen.py": lambda args: [arg.removeprefix("../") for arg in args]}
    )

    assert correct("//tools/gen.py", ["../a", "b"]) == ["a", "b"]
    with pytest.raises(ConfigurationError):
        correct("//tools/other.py", [])
