"""
Path and flag rewriting from GN to GYP.

GN paths are source-absolute (`//foo/bar.cc`) or point into the build
directory (`//out/<build>/gen/foo.h`). GYP paths are relative to the GYP file,
with generated files living under SHARED_INTERMEDIATE_DIR.
"""

import re
from typing import Callable

from gn2gyp.config.loader import ConfigurationError
from gn2gyp.errors import MalformedFlagsError, UnexpectedPathError

# (script, args) -> args. Argument paths are relative to the GN build
# directory and have to be rewritten per script.
CorrectScriptArgs = Callable[[str, list[str]], list[str]]

# Include path following -I in cflags -> GYP include dir.
CorrectIncludePath = Callable[[str], str]

INCLUDE_FLAG_RE = re.compile(r"^-[Ii]")

# Flags that also accept their directory joined on, as in `-isystem/usr/include`.
# Longest first so `-I` never shadows the others.
JOINABLE_INCLUDE_FLAGS = ("-idirafter", "-isystem", "-iquote", "-I")


class PathRewriter:
    """Rewrites GN paths into GYP paths for one GYP file location."""

    def __init__(
        self,
        shared_intermediate_token: str = "<(SHARED_INTERMEDIATE_DIR)/",
        project_root_token: str = "../",
    ):
        self.shared_intermediate_token = shared_intermediate_token
        self.project_root_token = project_root_token

    def __call__(self, build: str, path: str) -> str:
        """
        Rewrite a GN path.

        Args:
            build: The GN build name, used to recognize generated paths
            path: A GN path such as `//foo/bar.cc` or `//out/<build>/gen/x.h`

        Raises:
            UnexpectedPathError: If the path is not source-absolute
        """
        out_prefix = f"//out/{build}/"
        if path.startswith(out_prefix):
            return self.shared_intermediate_token + path[len(out_prefix):]
        if path.startswith("//"):
            return self.project_root_token + path[2:]
        raise UnexpectedPathError(f"Unexpected path: {path}")


def passthrough_script_args(script: str, args: list[str]) -> list[str]:
    return list(args)


def strip_parent_dir(path: str) -> str:
    """
    Lop one level of depth off an include path.

    Include flags are relative to the two-level deep build directory, while
    the GYP file sits one level below the source root.
    """
    return path[len("../"):] if path.startswith("../") else path


def correct_script_args_by_table(
    table: dict[str, Callable[[list[str]], list[str]]],
) -> CorrectScriptArgs:
    """
    Build a CorrectScriptArgs from per-script corrections.

    Scripts missing from the table are rejected rather than passed through,
    since their arguments would point at the wrong directory.
    """

    def correct(script: str, args: list[str]) -> list[str]:
        if script not in table:
            raise ConfigurationError(f"No argument correction registered for script {script}")
        return table[script](args)

    return correct


def extract_include_dirs(
    flags: list[str], correct: CorrectIncludePath = strip_parent_dir
) -> list[str]:
    """
    Extract include directories from a list of compiler flags.

    `-I dir`, `-isystem dir` and friends take the following token. The joined
    forms of `-I`, `-isystem`, `-iquote` and `-idirafter` (`-Idir`,
    `-isystem/usr/include`) carry the directory themselves.

    Raises:
        MalformedFlagsError: If an include flag is the last token
    """
    result = []
    for i, flag in enumerate(flags):
        if not INCLUDE_FLAG_RE.match(flag):
            continue
        joined = next(
            (flag[len(prefix):] for prefix in JOINABLE_INCLUDE_FLAGS if flag.startswith(prefix)),
            "",
        )
        if joined:
            result.append(correct(joined))
            continue
        if i + 1 == len(flags):
            raise MalformedFlagsError(f"Unexpected value for last cflag: {flag}")
        result.append(correct(flags[i + 1]))
    return result
