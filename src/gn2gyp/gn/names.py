"""
GN target name parsing and formatting.

A fully qualified GN target name looks like `//path/to:target(//toolchain:label)`,
where the toolchain suffix is omitted for targets built with the default
toolchain.
"""

import re

from pydantic import BaseModel, ConfigDict

from gn2gyp.errors import MalformedNameError

TARGET_NAME_RE = re.compile(r"^//([^:]*):([^:()]*)(?:\((.*)\))?$")


class GnTargetName(BaseModel):
    """The components of a GN target name."""

    model_config = ConfigDict(frozen=True)

    path: str
    target: str
    toolchain: str | None = None

    @property
    def label(self) -> str:
        """The toolchain-less form, e.g. `//src/base:base`."""
        return f"//{self.path}:{self.target}"

    def format(self) -> str:
        if self.toolchain is None:
            return self.label
        return f"{self.label}({self.toolchain})"

    def __str__(self) -> str:
        return self.format()


def parse_target_name(name: str) -> GnTargetName:
    """
    Parse a GN target name into its components.

    Args:
        name: A name such as `//foo:bar` or `//foo:bar(//toolchain:host)`

    Returns:
        The parsed GnTargetName

    Raises:
        MalformedNameError: If the name doesn't match the expected grammar
    """
    match = TARGET_NAME_RE.match(name)
    if not match:
        raise MalformedNameError(f"A target name doesn't match the expected regex: {name}")
    path, target, toolchain = match.groups()
    return GnTargetName(path=path, target=target, toolchain=toolchain)


def strip_toolchain(name: str) -> str:
    """Return the label of a target name with any toolchain suffix removed."""
    return parse_target_name(name).label
