"""
Partitioning of translated targets into subprojects (one GYP file each).
"""

from dataclasses import dataclass
from typing import Callable

from gn2gyp.config.models import SubprojectConfig
from gn2gyp.errors import MisclassifiedTargetError
from gn2gyp.translator.paths import PathRewriter


@dataclass
class Subproject:
    """
    A named output grouping.

    `matches` decides membership from a GN label. `rewrite_path` replaces the
    default PathRewriter for targets in this subproject, since each GYP file
    may sit at a different depth below the source root.
    """

    name: str
    gyp_file: str
    matches: Callable[[str], bool]
    rewrite_path: PathRewriter | None = None

    @classmethod
    def from_config(
        cls, config: SubprojectConfig, shared_intermediate_token: str
    ) -> "Subproject":
        prefixes = tuple(config.target_prefixes)
        rewrite_path = None
        if config.project_root_token is not None:
            rewrite_path = PathRewriter(shared_intermediate_token, config.project_root_token)
        return cls(
            name=config.name,
            gyp_file=config.gyp_file,
            matches=lambda label: label.startswith(prefixes),
            rewrite_path=rewrite_path,
        )


class SubprojectClassifier:
    """Assigns GN labels to subprojects and qualifies cross-file dependencies."""

    def __init__(
        self,
        subprojects: list[Subproject] | None = None,
        placeholder_subproject: str | None = None,
    ):
        self.subprojects = list(subprojects or [])
        self._by_name = {sub.name: sub for sub in self.subprojects}
        if placeholder_subproject is not None and placeholder_subproject not in self._by_name:
            raise MisclassifiedTargetError(
                f"Placeholder subproject {placeholder_subproject} is not a known subproject"
            )
        self._placeholder_name = placeholder_subproject

    @property
    def enabled(self) -> bool:
        return bool(self.subprojects)

    @property
    def placeholder_home(self) -> Subproject | None:
        """The subproject that owns the shared placeholder-source generator."""
        if not self.subprojects:
            return None
        if self._placeholder_name is not None:
            return self._by_name[self._placeholder_name]
        return self.subprojects[0]

    def classify(self, label: str) -> Subproject | None:
        """
        Get the subproject a GN label belongs to.

        Returns None when no subprojects are configured.

        Raises:
            MisclassifiedTargetError: If the label matches zero or several subprojects
        """
        if not self.subprojects:
            return None
        matches = [sub for sub in self.subprojects if sub.matches(label)]
        if len(matches) != 1:
            raise MisclassifiedTargetError(
                f"{label} matches {len(matches)} subprojects "
                f"({[sub.name for sub in matches]}); expected exactly one"
            )
        return matches[0]

    @staticmethod
    def qualify(dependent: Subproject | None, dependency: Subproject | None, name: str) -> str:
        """Prefix `name` with the dependency's GYP file if it lives in another file."""
        if dependency is None or dependent is None or dependency.name == dependent.name:
            return name
        return f"{dependency.gyp_file}:{name}"
