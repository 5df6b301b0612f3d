"""
GN target descriptions.

Field names follow the JSON emitted by `gn desc --format=json` so that a
snapshot round-trips without translation.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from gn2gyp.config.models import GnTargetType


class GnTarget(BaseModel):
    """A single GN target as described for one toolchain."""

    # gn desc reports many more fields than we translate (visibility, testonly,
    # public_configs, ...). They're kept as extras so snapshots stay lossless.
    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    deps: list[str] = Field(default_factory=list)
    target_type: GnTargetType = Field(alias="type")
    toolchain: str
    include_dirs: list[str] = Field(default_factory=list)
    defines: list[str] = Field(default_factory=list)
    sources: list[str] = Field(default_factory=list)
    inputs: list[str] = Field(default_factory=list)
    outputs: list[str] = Field(default_factory=list)
    args: list[str] = Field(default_factory=list)
    script: str | None = None
    libs: list[str] = Field(default_factory=list)
    cflags: list[str] = Field(default_factory=list)
    cflags_cc: list[str] = Field(default_factory=list)

    def to_raw(self) -> dict[str, Any]:
        """Dump back to the `gn desc` JSON shape, omitting fields that were never set."""
        fields = type(self).model_fields
        explicit = {
            fields[name].alias or name for name in self.model_fields_set if name in fields
        }
        explicit.update(self.model_extra or {})
        data = self.model_dump(mode="json", by_alias=True)
        return {key: value for key, value in data.items() if key in explicit}
