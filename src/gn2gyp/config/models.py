"""
Core configuration models for gn2gyp.

Defines the GN/GYP vocabularies and the translator configuration using
Pydantic for validation.
"""

from enum import Enum

from pydantic import BaseModel, Field, field_validator


class GnTargetType(str, Enum):
    """Target types reported by `gn desc`."""

    EXECUTABLE = "executable"
    STATIC_LIBRARY = "static_library"
    SHARED_LIBRARY = "shared_library"
    LOADABLE_MODULE = "loadable_module"
    SOURCE_SET = "source_set"
    GROUP = "group"
    ACTION = "action"
    ACTION_FOREACH = "action_foreach"
    COPY = "copy"
    BUNDLE_DATA = "bundle_data"
    CREATE_BUNDLE = "create_bundle"
    GENERATED_FILE = "generated_file"
    RUST_LIBRARY = "rust_library"
    RUST_PROC_MACRO = "rust_proc_macro"


class GypTargetType(str, Enum):
    """Target types GYP understands."""

    EXECUTABLE = "executable"
    STATIC_LIBRARY = "static_library"
    SHARED_LIBRARY = "shared_library"
    LOADABLE_MODULE = "loadable_module"
    NONE = "none"


class GypToolset(str, Enum):
    """The closed set of GYP toolsets."""

    HOST = "host"
    TARGET = "target"


# ============================================================================
# Translator Configuration
# ============================================================================


class SubprojectConfig(BaseModel):
    """
    A named output grouping (one GYP file) selected by GN label prefixes.

    Targets whose label starts with one of `target_prefixes` land in
    `gyp_file`. Dependencies that cross into another subproject are written
    as `<gyp_file>:<target>#<toolset>`.
    """

    name: str = Field(description="Subproject name")
    gyp_file: str = Field(description="GYP file the subproject's targets are written to")
    target_prefixes: list[str] = Field(
        default_factory=list, description="GN label prefixes belonging to this subproject"
    )
    project_root_token: str | None = Field(
        default=None,
        description="Override for the source-root path prefix used in this subproject's file",
    )


class FetchConfig(BaseModel):
    """Configuration for querying `gn desc`."""

    builds: list[str] = Field(
        default_factory=list, description="Build directories (out/<build>) to describe"
    )
    max_concurrency: int = Field(
        default=8, ge=1, description="Maximum simultaneous `gn desc` invocations"
    )


class TranslatorConfig(BaseModel):
    """Root configuration model for a GN to GYP translation."""

    root_target: str = Field(description="GN target whose closure is translated")
    build_name: str = Field(description="The single GN build whose targets are emitted")
    toolchain_map: dict[str, GypToolset] = Field(
        default_factory=dict, description="GN toolchain label -> GYP toolset"
    )
    excluded_prefixes: list[str] = Field(
        default_factory=list,
        description="GN label prefixes never traversed (bootstrap / self-hosting targets)",
    )
    shared_intermediate_token: str = Field(
        default="<(SHARED_INTERMEDIATE_DIR)/",
        description="Prefix replacing //out/<build>/ in generated paths",
    )
    project_root_token: str = Field(
        default="../", description="Prefix replacing // in source paths"
    )
    placeholder_source: str = Field(
        default="empty.cc", description="Synthetic source for libraries without compiled sources"
    )
    placeholder_target: str = Field(
        default="gen_empty_cc", description="GYP target generating the placeholder source"
    )
    placeholder_subproject: str | None = Field(
        default=None,
        description="Subproject owning the placeholder target (defaults to the first one)",
    )
    python_executable: str = Field(
        default="python", description="Interpreter prepended to .py action scripts"
    )
    emit_link_libraries: bool = Field(
        default=False, description="Translate GN libs into link_settings.libraries"
    )
    subprojects: list[SubprojectConfig] = Field(default_factory=list)
    fetch: FetchConfig = Field(default_factory=FetchConfig)

    @field_validator("root_target")
    @classmethod
    def _root_is_label(cls, v: str) -> str:
        if not v.startswith("//"):
            raise ValueError(f"root_target must be a GN label starting with '//': {v}")
        return v

    def is_excluded(self, label: str) -> bool:
        """Check if a GN label is excluded from traversal."""
        return any(label.startswith(prefix) for prefix in self.excluded_prefixes)

    def get_toolsets(self) -> list[GypToolset]:
        """Get the distinct toolsets named by the toolchain map, in enum order."""
        used = set(self.toolchain_map.values())
        return [toolset for toolset in GypToolset if toolset in used]
