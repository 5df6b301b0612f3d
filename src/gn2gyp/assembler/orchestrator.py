"""
GYP project assembly.

This orchestrator turns a GN project into GYP targets:
1. Computing the closure of the root target across builds and toolchains
2. Translating each (target, toolchain) of the selected build into a fragment
3. Merging fragments per GN label into GYP targets
4. Grouping targets into subproject files
5. Adding the shared placeholder-source generator
"""

import logging
from dataclasses import dataclass, field

from gn2gyp.analyzer.closure import ClosureResolver
from gn2gyp.assembler.merger import GypTargetBuilder
from gn2gyp.config.models import GypTargetType, TranslatorConfig
from gn2gyp.errors import InconsistentFragmentError
from gn2gyp.gn.project import GnProject
from gn2gyp.gyp.models import GypAction, GypFile, GypFragment, GypTarget
from gn2gyp.translator.fragment import FragmentTranslator, gypify_target_name
from gn2gyp.translator.grouping import Subproject, SubprojectClassifier
from gn2gyp.translator.paths import (
    CorrectIncludePath,
    CorrectScriptArgs,
    passthrough_script_args,
    strip_parent_dir,
)

logger = logging.getLogger(__name__)

DEFAULT_FILE = "default"


@dataclass
class TranslationHooks:
    """
    Project-specific functions injected into the translation.

    When `subprojects` is None they are built from the configuration's
    `subprojects` entries.
    """

    correct_script_args: CorrectScriptArgs = passthrough_script_args
    correct_include_path: CorrectIncludePath = strip_parent_dir
    subprojects: list[Subproject] | None = None


@dataclass
class GypProject:
    """The assembled GYP targets, grouped by output file."""

    files: dict[str, GypFile] = field(default_factory=dict)

    @property
    def targets(self) -> list[GypTarget]:
        return [target for gyp_file in self.files.values() for target in gyp_file.targets]

    def get_file(self, name: str | None = None) -> GypFile:
        if name is None:
            if len(self.files) != 1:
                raise KeyError(
                    f"Project has {len(self.files)} files; pass one of {list(self.files)}"
                )
            return next(iter(self.files.values()))
        return self.files[name]

    def to_gyp_file(self, name: str | None = None) -> str:
        """Render one file (the only one, if `name` is omitted) as GYP text."""
        return self.get_file(name).to_gyp_file()


class GypProjectAssembler:
    """Assembles a GypProject from a GnProject."""

    def __init__(
        self,
        project: GnProject,
        config: TranslatorConfig,
        hooks: TranslationHooks | None = None,
    ):
        self.project = project
        self.config = config
        self.hooks = hooks or TranslationHooks()

        subprojects = self.hooks.subprojects
        if subprojects is None:
            subprojects = [
                Subproject.from_config(sub, config.shared_intermediate_token)
                for sub in config.subprojects
            ]
        self.classifier = SubprojectClassifier(subprojects, config.placeholder_subproject)
        self.translator = FragmentTranslator(
            project,
            config,
            correct_script_args=self.hooks.correct_script_args,
            correct_include_path=self.hooks.correct_include_path,
            classifier=self.classifier,
        )

    def assemble(self) -> GypProject:
        """
        Build the GYP project for the configured root target and build.

        Returns:
            GypProject with one file per subproject (or a single default file)
        """
        build = self.project.get_build(self.config.build_name)
        closure = ClosureResolver(self.project, self.config.is_excluded).resolve(
            self.config.root_target
        )

        result = GypProject()
        gyp_names: dict[str, str] = {}
        for name in closure.get_dependency_order():
            keys = closure.keys_for(name, self.config.build_name)
            if not keys:
                logger.debug(f"{name} is not part of build {self.config.build_name}; skipping")
                continue

            gyp_name = gypify_target_name(name)
            if gyp_name in gyp_names:
                raise InconsistentFragmentError(
                    f"{name} and {gyp_names[gyp_name]} both map to GYP target {gyp_name}"
                )
            gyp_names[gyp_name] = name

            builder = GypTargetBuilder()
            for key in keys:
                target = build.get_target(key.toolchain, key.name)
                builder.add_fragment(self.translator.translate(target, key))
            self._file_for(result, self.classifier.classify(name)).targets.extend(
                builder.finalize()
            )

        placeholder = self._build_placeholder_generator()
        if placeholder:
            self._file_for(result, self.classifier.placeholder_home).targets.extend(placeholder)

        for gyp_file in result.files.values():
            logger.info(f"Assembled {len(gyp_file.targets)} GYP targets for {gyp_file.name}")
        return result

    def _file_for(self, project: GypProject, subproject: Subproject | None) -> GypFile:
        name = subproject.gyp_file if subproject is not None else DEFAULT_FILE
        if name not in project.files:
            project.files[name] = GypFile(name=name)
        return project.files[name]

    def _build_placeholder_generator(self) -> list[GypTarget]:
        """Create the target that generates the empty source static libraries link against."""
        toolsets = self.config.get_toolsets()
        if not toolsets:
            return []

        output = self.config.shared_intermediate_token + self.config.placeholder_source
        builder = GypTargetBuilder()
        for toolset in toolsets:
            builder.add_fragment(
                GypFragment(
                    toolset=toolset,
                    target=GypTarget(
                        target_name=self.config.placeholder_target,
                        type=GypTargetType.NONE,
                        toolsets=[toolset],
                        actions=[
                            GypAction(
                                action_name=f"{self.config.placeholder_target}_action",
                                inputs=[],
                                outputs=[output],
                                action=["touch", output],
                            )
                        ],
                    ),
                )
            )
        return builder.finalize()
