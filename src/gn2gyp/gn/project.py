"""
In-memory model of a GN project.

A GnProject is a collection of GnBuilds (one per out/<build> directory); a
GnBuild indexes every target described for that build, across toolchains.
"""

import logging
from pathlib import Path
from typing import Any

import orjson
from pydantic import ValidationError

from gn2gyp.errors import (
    MissingRootTargetError,
    SnapshotError,
    UnknownBuildError,
    UnknownTargetError,
)
from gn2gyp.gn.models import GnTarget

logger = logging.getLogger(__name__)

# Assumed to exist in every build and to be built with the default toolchain.
TARGET_ALL = "//:all"


class GnBuild:
    """The collection of targets in a single build (out/<build>)."""

    def __init__(self, targets: dict[str, GnTarget]):
        if TARGET_ALL not in targets:
            raise MissingRootTargetError(f"GnBuild has no {TARGET_ALL} target")
        self._targets = dict(targets)
        self.default_toolchain = targets[TARGET_ALL].toolchain

    def get_target(self, toolchain: str, name: str) -> GnTarget:
        """
        Get the target built from `name` with `toolchain`.

        Targets in the default toolchain are keyed by their bare name; all
        others carry a `(toolchain)` suffix.

        Raises:
            UnknownTargetError: If no such target exists
        """
        key = name if toolchain == self.default_toolchain else f"{name}({toolchain})"
        target = self._targets.get(key)
        if target is None:
            raise UnknownTargetError(f"No target {name} with toolchain {toolchain}")
        return target

    def get_default_toolchain(self) -> str:
        return self.default_toolchain

    @property
    def target_names(self) -> list[str]:
        return list(self._targets.keys())

    @property
    def toolchains(self) -> list[str]:
        """Distinct toolchains used by targets in this build."""
        return list(dict.fromkeys(target.toolchain for target in self._targets.values()))

    def __contains__(self, name: str) -> bool:
        return name in self._targets

    def __len__(self) -> int:
        return len(self._targets)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "GnBuild":
        """Create a build from a `gn desc`-shaped mapping of name -> fields."""
        if not isinstance(raw, dict):
            raise SnapshotError("A GN build must be a JSON object keyed by target name")
        targets = {}
        for name, fields in raw.items():
            try:
                targets[name] = GnTarget.model_validate(fields)
            except ValidationError as e:
                raise SnapshotError(f"Invalid description for target {name}:\n{e}")
        return cls(targets)

    def to_dict(self) -> dict[str, Any]:
        return {name: target.to_raw() for name, target in self._targets.items()}


class GnProject:
    """All builds of a GN project."""

    def __init__(self, builds: dict[str, GnBuild] | None = None):
        self._builds: dict[str, GnBuild] = dict(builds or {})

    @property
    def build_names(self) -> list[str]:
        return list(self._builds.keys())

    def get_build(self, build_name: str) -> GnBuild:
        """
        Get a build by name.

        Raises:
            UnknownBuildError: If the build doesn't exist
        """
        if build_name not in self._builds:
            raise UnknownBuildError(
                f"Build {build_name} not found. Known builds: {self.build_names}"
            )
        return self._builds[build_name]

    def add_build(self, build_name: str, build: GnBuild) -> None:
        if build_name in self._builds:
            raise ValueError(f"Build {build_name} already exists")
        self._builds[build_name] = build

    @property
    def target_names(self) -> list[str]:
        """All target names across all builds, de-duplicated."""
        names: dict[str, None] = {}
        for build in self._builds.values():
            names.update(dict.fromkeys(build.target_names))
        return list(names)

    # =========================================================================
    # Persistence
    # =========================================================================

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "GnProject":
        return cls({name: GnBuild.from_dict(targets) for name, targets in raw.items()})

    def to_dict(self) -> dict[str, Any]:
        return {name: build.to_dict() for name, build in self._builds.items()}

    def serialize(self) -> bytes:
        """Serialize the project to JSON (build -> target -> fields)."""
        return orjson.dumps(self.to_dict(), option=orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS)

    @classmethod
    def deserialize(cls, data: bytes | str) -> "GnProject":
        try:
            raw = orjson.loads(data)
        except orjson.JSONDecodeError as e:
            raise SnapshotError(f"Invalid JSON in GN snapshot: {e}")
        if not isinstance(raw, dict):
            raise SnapshotError("GN snapshot must be a JSON object keyed by build name")
        return cls.from_dict(raw)

    def save(self, path: Path) -> Path:
        """Save a snapshot of the project so later runs can skip querying GN."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            f.write(self.serialize())
        logger.info(f"Saved GN snapshot with {len(self._builds)} builds to {path}")
        return path

    @classmethod
    def load(cls, path: Path) -> "GnProject":
        if not path.exists():
            raise SnapshotError(f"GN snapshot not found: {path}")
        with open(path, "rb") as f:
            return cls.deserialize(f.read())
