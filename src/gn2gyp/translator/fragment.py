"""
Translation of a single GN target into a GYP target fragment.

A fragment is the GYP form of one GN target for one (build, toolchain); the
fragments of a logical target are merged afterwards by GypTargetBuilder.
"""

import logging
from functools import partial

from gn2gyp.analyzer.closure import TargetBuildKey
from gn2gyp.config.models import GnTargetType, GypTargetType, GypToolset, TranslatorConfig
from gn2gyp.errors import (
    MissingScriptError,
    UnrecognizedToolchainError,
    UnsupportedTargetTypeError,
)
from gn2gyp.gn.models import GnTarget
from gn2gyp.gn.names import parse_target_name
from gn2gyp.gn.project import GnProject
from gn2gyp.gyp.models import GypAction, GypFragment, GypLinkSettings, GypTarget
from gn2gyp.translator.grouping import Subproject, SubprojectClassifier
from gn2gyp.translator.paths import (
    CorrectIncludePath,
    CorrectScriptArgs,
    PathRewriter,
    extract_include_dirs,
    passthrough_script_args,
    strip_parent_dir,
)

logger = logging.getLogger(__name__)

GN_TO_GYP_TYPE: dict[GnTargetType, GypTargetType] = {
    GnTargetType.EXECUTABLE: GypTargetType.EXECUTABLE,
    GnTargetType.STATIC_LIBRARY: GypTargetType.STATIC_LIBRARY,
    GnTargetType.SHARED_LIBRARY: GypTargetType.SHARED_LIBRARY,
    GnTargetType.LOADABLE_MODULE: GypTargetType.LOADABLE_MODULE,
    # A source set is a "virtual static library" in GN. A real static library
    # is equivalent for GYP's purposes, if a bit slower to build.
    GnTargetType.SOURCE_SET: GypTargetType.STATIC_LIBRARY,
    # The translator replicates the action (if any) for these itself.
    GnTargetType.GROUP: GypTargetType.NONE,
    GnTargetType.ACTION: GypTargetType.NONE,
    GnTargetType.COPY: GypTargetType.NONE,
}

UNSUPPORTED_TYPES = frozenset(
    {
        GnTargetType.ACTION_FOREACH,
        GnTargetType.BUNDLE_DATA,
        GnTargetType.CREATE_BUNDLE,
        GnTargetType.GENERATED_FILE,
        GnTargetType.RUST_LIBRARY,
        GnTargetType.RUST_PROC_MACRO,
    }
)

COMPILED_SOURCE_EXTENSIONS = (".c", ".cc", ".cpp", ".cxx", ".c++", ".m", ".mm", ".s", ".S", ".asm")


def gypify_target_name(gn_name: str) -> str:
    """
    Create a GYP target name from a GN target name.

    `//src/base:base(//toolchain:host)` becomes `src_base_base`. The mapping
    isn't guaranteed to be injective.
    """
    if "(" in gn_name:
        gn_name = gn_name[: gn_name.index("(")]
    if gn_name.startswith("//"):
        gn_name = gn_name[2:]
    for char in (":", "/", "+"):
        gn_name = gn_name.replace(char, "_")
    return gn_name


def gypify_target_type(gn_type: GnTargetType) -> GypTargetType:
    """
    Get the GYP target type for a GN target type.

    Raises:
        UnsupportedTargetTypeError: For GN types that have no translation yet
    """
    gn_type = GnTargetType(gn_type)
    if gn_type in UNSUPPORTED_TYPES:
        raise UnsupportedTargetTypeError(f"GN target type {gn_type.value} is not supported")
    return GN_TO_GYP_TYPE[gn_type]


def is_compiled_source(path: str) -> bool:
    return path.endswith(COMPILED_SOURCE_EXTENSIONS)


class FragmentTranslator:
    """Converts GN targets into per-toolset GYP fragments."""

    def __init__(
        self,
        project: GnProject,
        config: TranslatorConfig,
        correct_script_args: CorrectScriptArgs = passthrough_script_args,
        correct_include_path: CorrectIncludePath = strip_parent_dir,
        classifier: SubprojectClassifier | None = None,
    ):
        """
        Initialize the translator.

        Args:
            project: The GN project the translated targets come from
            config: Translator configuration (toolchain map, path tokens, ...)
            correct_script_args: Rewrites action script arguments, keyed by script
            correct_include_path: Rewrites include paths scraped from cflags
            classifier: Assigns targets to subprojects; None means a single file
        """
        self.project = project
        self.config = config
        self.correct_script_args = correct_script_args
        self.correct_include_path = correct_include_path
        self.classifier = classifier or SubprojectClassifier()
        self.rewrite_path = PathRewriter(config.shared_intermediate_token, config.project_root_token)

    def to_gyp_toolset(self, build: str, toolchain: str | None) -> GypToolset:
        """
        Get the GYP toolset for a GN toolchain.

        Raises:
            UnrecognizedToolchainError: If the toolchain isn't in the toolchain map
        """
        if not toolchain:
            toolchain = self.project.get_build(build).default_toolchain
        toolset = self.config.toolchain_map.get(toolchain)
        if toolset is None:
            raise UnrecognizedToolchainError(f"Unrecognized GN toolchain: {toolchain}")
        return toolset

    def translate(self, target: GnTarget, key: TargetBuildKey) -> GypFragment:
        """
        Create the GYP fragment for one GN target.

        Args:
            target: The GN target
            key: The name, build and toolchain the target was reached with

        Returns:
            GypFragment for the toolset the GN toolchain maps to
        """
        target_type = gypify_target_type(target.target_type)
        toolset = self.to_gyp_toolset(key.build, key.toolchain)
        target_name = gypify_target_name(key.name)
        subproject = self.classifier.classify(key.name)
        rewrite = partial(self._rewriter_for(subproject), key.build)

        include_dirs = [rewrite(path) for path in target.include_dirs]
        # A trailing include flag in cflags must not take a cflags_cc token.
        for flags in (target.cflags, target.cflags_cc):
            include_dirs += extract_include_dirs(flags, self.correct_include_path)

        gyp_target = GypTarget(
            target_name=target_name,
            type=target_type,
            toolsets=[toolset],
            include_dirs=list(dict.fromkeys(include_dirs)),
            defines=list(target.defines),
            sources=[rewrite(path) for path in target.sources],
            dependencies=self._translate_deps(target, key, subproject),
            cflags=list(target.cflags),
            cflags_cc=list(target.cflags_cc),
            # Static libraries can't depend on each other in GYP without this.
            hard_dependency=1,
        )

        if target_type == GypTargetType.STATIC_LIBRARY and not any(
            is_compiled_source(source) for source in gyp_target.sources
        ):
            # Give the linker something to archive.
            gyp_target.sources.append(
                self.config.shared_intermediate_token + self.config.placeholder_source
            )
            gyp_target.dependencies.append(
                self.classifier.qualify(
                    subproject,
                    self.classifier.placeholder_home,
                    f"{self.config.placeholder_target}#{toolset.value}",
                )
            )

        if self.config.emit_link_libraries and target.libs:
            gyp_target.link_settings = GypLinkSettings(
                libraries=[
                    lib if "/" in lib or lib.startswith("-") else f"-l{lib}"
                    for lib in target.libs
                ]
            )

        actions = self._translate_actions(target, key, target_name, rewrite)
        if actions:
            gyp_target.actions = actions

        return GypFragment(
            toolset=toolset,
            target=gyp_target,
            outputs=[rewrite(path) for path in target.outputs],
        )

    def _rewriter_for(self, subproject: Subproject | None) -> PathRewriter:
        if subproject is not None and subproject.rewrite_path is not None:
            return subproject.rewrite_path
        return self.rewrite_path

    def _translate_deps(
        self, target: GnTarget, key: TargetBuildKey, subproject: Subproject | None
    ) -> list[str]:
        dependencies = []
        for dep in target.deps:
            dep_name = parse_target_name(dep)
            if self.config.is_excluded(dep_name.label):
                continue
            # Unqualified dependencies are built with the dependent's toolchain.
            toolset = self.to_gyp_toolset(key.build, dep_name.toolchain or key.toolchain)
            dependencies.append(
                self.classifier.qualify(
                    subproject,
                    self.classifier.classify(dep_name.label),
                    f"{gypify_target_name(dep_name.label)}#{toolset.value}",
                )
            )
        return dependencies

    def _translate_actions(
        self, target: GnTarget, key: TargetBuildKey, target_name: str, rewrite
    ) -> list[GypAction]:
        if target.target_type == GnTargetType.ACTION:
            if not target.script:
                raise MissingScriptError(f"{key.name} is an action but has no script")
            command = [self.config.python_executable] if target.script.endswith(".py") else []
            command.append(rewrite(target.script))
            command += self.correct_script_args(target.script, list(target.args))
            return [
                GypAction(
                    action_name=f"{target_name}_action",
                    inputs=[rewrite(path) for path in target.inputs + target.sources],
                    outputs=[rewrite(path) for path in target.outputs],
                    action=command,
                )
            ]

        if target.target_type == GnTargetType.COPY:
            return [
                GypAction(
                    action_name=f"{target_name}_action",
                    inputs=[rewrite(path) for path in target.sources],
                    outputs=[rewrite(path) for path in target.outputs],
                    action=["cp", "<@(_inputs)", "<@(_outputs)"],
                )
            ]

        return []
