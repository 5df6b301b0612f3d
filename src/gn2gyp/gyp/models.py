"""
GYP target models.

GYP files are Python literals rather than JSON, so models are always dumped
without `None` values and booleans are spelled as integers.
"""

from typing import Any

import orjson
from pydantic import BaseModel, Field

from gn2gyp.config.models import GypTargetType, GypToolset

GEN_MSG = "This file is automatically generated -- do not edit!"


class GypAction(BaseModel):
    """A GYP build action."""

    action_name: str
    inputs: list[str] = Field(default_factory=list)
    outputs: list[str] = Field(default_factory=list)
    action: list[str] = Field(default_factory=list)


class GypLinkSettings(BaseModel):
    libraries: list[str] = Field(default_factory=list)


class GypFields(BaseModel):
    """Fields of a GYP target that may appear under a toolset condition."""

    toolsets: list[GypToolset] | None = None
    include_dirs: list[str] | None = None
    dependencies: list[str] | None = None
    export_dependent_settings: list[str] | None = None
    defines: list[str] | None = None
    sources: list[str] | None = None
    actions: list[GypAction] | None = None
    link_settings: GypLinkSettings | None = None
    cflags: list[str] | None = None
    cflags_cc: list[str] | None = None
    hard_dependency: int | None = None

    def set_fields(self) -> dict[str, Any]:
        """Fields that carry a value, keyed by name (values are not copied)."""
        return {
            name: getattr(self, name)
            for name in GypFields.model_fields
            if getattr(self, name) is not None
        }


class GypTarget(GypFields):
    """A GYP target."""

    target_name: str
    type: GypTargetType
    target_conditions: list[tuple[str, GypFields]] | None = None

    def to_gyp(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class GypFragment(BaseModel):
    """
    The GYP form of one GN target for a single toolset.

    Fragments are merged per logical target by GypTargetBuilder. `outputs`
    are the GN target's declared outputs, already rewritten to GYP paths;
    they're only consulted for executables, whose output path GYP can't set.
    """

    toolset: GypToolset
    target: GypTarget
    outputs: list[str] = Field(default_factory=list)


class GypFile(BaseModel):
    """The targets written to one GYP file."""

    name: str
    targets: list[GypTarget] = Field(default_factory=list)

    def to_gyp_file(self) -> str:
        body = orjson.dumps(
            {"targets": [target.to_gyp() for target in self.targets]},
            option=orjson.OPT_INDENT_2,
        )
        return f"# {GEN_MSG}\n{body.decode()}\n"
