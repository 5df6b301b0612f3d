"""
Merging of per-toolset GYP fragments into GYP targets.

Each GypTargetBuilder corresponds to one GN target label (sans toolchain). It
collects one fragment per GYP toolset and combines them into a single target,
keeping fields that may legitimately differ between toolsets under
`target_conditions`.
"""

import logging
from enum import Enum
from typing import Any

from gn2gyp.config.models import GypTargetType, GypToolset
from gn2gyp.errors import (
    CrossToolsetDependencyMismatchError,
    DuplicateToolsetError,
    EmptyBuilderError,
    InconsistentFragmentError,
    ProxyOutputError,
)
from gn2gyp.gyp.models import GypAction, GypFields, GypFragment, GypTarget

logger = logging.getLogger(__name__)

PROXY_SUFFIX = "_proxy"


class FieldPolicy(str, Enum):
    """How a fragment field is merged across toolsets."""

    SHARED = "shared"  # must be identical; hoisted to the top level
    PER_TOOLSET = "per_toolset"  # kept under a _toolset condition


FIELD_POLICIES: dict[str, FieldPolicy] = {
    "dependencies": FieldPolicy.SHARED,
    "include_dirs": FieldPolicy.PER_TOOLSET,
    "export_dependent_settings": FieldPolicy.PER_TOOLSET,
    "defines": FieldPolicy.PER_TOOLSET,
    "sources": FieldPolicy.PER_TOOLSET,
    "actions": FieldPolicy.PER_TOOLSET,
    "link_settings": FieldPolicy.PER_TOOLSET,
    "cflags": FieldPolicy.PER_TOOLSET,
    "cflags_cc": FieldPolicy.PER_TOOLSET,
    "hard_dependency": FieldPolicy.PER_TOOLSET,
}


def toolset_condition(toolset: GypToolset) -> str:
    return f'_toolset=="{toolset.value}"'


class GypTargetBuilder:
    """Builds GYP targets from the per-toolset fragments of one GN target."""

    def __init__(self):
        self._fragments: dict[GypToolset, GypFragment] = {}
        self.target_name = ""
        self.target_type: GypTargetType | None = None

    def add_fragment(self, fragment: GypFragment) -> None:
        """
        Add the fragment for a single toolset.

        Raises:
            DuplicateToolsetError: If a fragment for the toolset was already added
            InconsistentFragmentError: If the fragment disagrees with earlier ones
                on name or type, or isn't a plain single-toolset target
        """
        target = fragment.target
        if target.toolsets != [fragment.toolset]:
            raise InconsistentFragmentError(
                f"Target {target.target_name} should have only toolset "
                f"{fragment.toolset.value}, got {target.toolsets}"
            )
        if target.target_conditions:
            raise InconsistentFragmentError(
                f"Individual toolset config {fragment.toolset.value} for target "
                f"{target.target_name} shouldn't have its own target conditions"
            )
        if fragment.toolset in self._fragments:
            raise DuplicateToolsetError(
                f"Target {target.target_name} already has a {fragment.toolset.value} fragment"
            )
        if self._fragments and (
            target.target_name != self.target_name or target.type != self.target_type
        ):
            raise InconsistentFragmentError(
                f"Fragment {target.target_name} ({target.type.value}) doesn't match "
                f"{self.target_name} ({self.target_type.value})"
            )

        self._fragments[fragment.toolset] = fragment
        self.target_name = target.target_name
        self.target_type = target.type

    @property
    def toolsets(self) -> list[GypToolset]:
        return [toolset for toolset in GypToolset if toolset in self._fragments]

    def finalize(self) -> list[GypTarget]:
        """
        Build the GYP targets for the added fragments.

        This is a single target, except for:
        - executables, whose output path GYP can't control. The real target
          is renamed `<name>_proxy` and `<name>` copies its product to the
          path the GN build expects.
        - static libraries, renamed `<name>_proxy` behind a `<name>` wrapper
          so dependents always depend on the same name.

        Raises:
            EmptyBuilderError: If no fragments were added
        """
        if not self._fragments or not self.target_name or self.target_type is None:
            raise EmptyBuilderError("No targets were specified")

        main_target = self._build_target()
        if self.target_type == GypTargetType.EXECUTABLE:
            main_target.target_name = self.target_name + PROXY_SUFFIX
            return [main_target, self._build_executable_proxy()]
        if self.target_type == GypTargetType.STATIC_LIBRARY:
            main_target.target_name = self.target_name + PROXY_SUFFIX
            return [main_target, self._build_library_wrapper()]
        return [main_target]

    def _build_target(self) -> GypTarget:
        toolsets = self.toolsets
        if len(toolsets) == 1:
            return self._fragments[toolsets[0]].target.model_copy(deep=True)

        shared: dict[str, Any] = {}
        conditions: list[tuple[str, GypFields]] = []
        for toolset in toolsets:
            fields = self._fragments[toolset].target.set_fields()
            fields.pop("toolsets", None)
            fields.setdefault("dependencies", [])

            branch: dict[str, Any] = {}
            for name, value in fields.items():
                policy = FIELD_POLICIES[name]
                if policy == FieldPolicy.PER_TOOLSET:
                    branch[name] = value
                    continue
                value = self._normalize_shared(name, toolset, value)
                if name not in shared:
                    shared[name] = value
                elif shared[name] != value:
                    raise CrossToolsetDependencyMismatchError(
                        f"{self.target_name} has different {name} for different toolsets"
                    )
            conditions.append(
                (toolset_condition(toolset), GypFields(**branch).model_copy(deep=True))
            )

        return GypTarget(
            target_name=self.target_name,
            type=self.target_type,
            toolsets=toolsets,
            target_conditions=conditions,
            **shared,
        )

    def _normalize_shared(self, name: str, toolset: GypToolset, value: Any) -> Any:
        if name != "dependencies":
            return value
        # Inside a toolset condition an unsuffixed dependency means "same
        # toolset", so the suffix can be dropped once it is known to match.
        suffix = f"#{toolset.value}"
        agnostic = []
        for dependency in value:
            if not dependency.endswith(suffix):
                raise CrossToolsetDependencyMismatchError(
                    f"{self.target_name} for {toolset.value} toolset has a "
                    f"non-{toolset.value} dependency: {dependency}"
                )
            agnostic.append(dependency[: -len(suffix)])
        return agnostic

    def _build_executable_proxy(self) -> GypTarget:
        toolsets = self.toolsets
        actions_for_toolsets: list[list[GypAction]] = []
        for toolset in toolsets:
            outputs = self._fragments[toolset].outputs
            if len(outputs) != 1:
                raise ProxyOutputError(
                    f"{self.target_name} as an executable should have just one output "
                    f"for {toolset.value}, got {len(outputs)}"
                )
            actions_for_toolsets.append(
                [
                    GypAction(
                        action_name="move_as_expected_output",
                        inputs=[f"<(PRODUCT_DIR)/{self.target_name}{PROXY_SUFFIX}"],
                        outputs=[outputs[0]],
                        action=["cp", "<@(_inputs)", "<@(_outputs)"],
                    )
                ]
            )

        proxy = GypTarget(
            target_name=self.target_name,
            type=GypTargetType.NONE,
            dependencies=[self.target_name + PROXY_SUFFIX],
            toolsets=toolsets,
        )
        if len(toolsets) == 1:
            proxy.actions = actions_for_toolsets[0]
        else:
            proxy.target_conditions = [
                (toolset_condition(toolset), GypFields(actions=actions))
                for toolset, actions in zip(toolsets, actions_for_toolsets)
            ]
        return proxy

    def _build_library_wrapper(self) -> GypTarget:
        library = self.target_name + PROXY_SUFFIX
        return GypTarget(
            target_name=self.target_name,
            type=GypTargetType.NONE,
            dependencies=[library],
            export_dependent_settings=[library],
            hard_dependency=1,
            toolsets=self.toolsets,
        )
