"""
Dependency closure over a GN project.

Computes every (target, build, toolchain) combination needed to build a root
target, across all builds and every toolchain the dependency graph reaches.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Callable

import networkx as nx
from pydantic import BaseModel, ConfigDict

from gn2gyp.gn.names import parse_target_name
from gn2gyp.gn.project import GnProject

logger = logging.getLogger(__name__)


class TargetBuildKey(BaseModel):
    """The minimal information that identifies one GN target in a GN project."""

    model_config = ConfigDict(frozen=True)

    name: str  # toolchain-less label
    build: str
    toolchain: str


@dataclass
class Closure:
    """Result of a closure traversal."""

    keys: list[TargetBuildKey] = field(default_factory=list)
    graph: nx.DiGraph = field(default_factory=nx.DiGraph)
    # name -> build -> keys
    _index: dict[str, dict[str, list[TargetBuildKey]]] = field(default_factory=dict, repr=False)

    def add_key(self, key: TargetBuildKey) -> None:
        self.keys.append(key)
        self._index.setdefault(key.name, {}).setdefault(key.build, []).append(key)
        self.graph.add_node(key)

    @property
    def logical_names(self) -> list[str]:
        """Distinct target labels in discovery order."""
        return list(dict.fromkeys(key.name for key in self.keys))

    def keys_for(self, name: str, build: str | None = None) -> list[TargetBuildKey]:
        by_build = self._index.get(name, {})
        if build is None:
            return [key for keys in by_build.values() for key in keys]
        return list(by_build.get(build, []))

    def get_dependency_order(self) -> list[str]:
        """
        Get logical names with dependencies before dependents.

        Falls back to discovery order if the label graph has cycles (GN itself
        rejects those, but a hand-edited snapshot might not).
        """
        label_graph = nx.DiGraph()
        label_graph.add_nodes_from(self.logical_names)
        for dependent, dependency in self.graph.edges():
            if dependent.name != dependency.name:
                label_graph.add_edge(dependency.name, dependent.name)

        if not nx.is_directed_acyclic_graph(label_graph):
            logger.warning("Target graph contains cycles; using discovery order")
            return self.logical_names

        # Ties are broken by discovery order so the output is stable.
        position = {name: i for i, name in enumerate(self.logical_names)}
        return list(nx.lexicographical_topological_sort(label_graph, key=position.__getitem__))


class ClosureResolver:
    """Breadth-first traversal of the (target, build, toolchain) graph."""

    def __init__(self, project: GnProject, is_excluded: Callable[[str], bool] | None = None):
        """
        Args:
            project: The GN project to traverse
            is_excluded: Predicate over target labels; matching dependencies
                (bootstrap / self-hosting targets) are never enqueued
        """
        self.project = project
        self.is_excluded = is_excluded or (lambda label: False)

    def resolve(self, root: str) -> Closure:
        """
        Get all target-build-toolchain keys needed to build `root`.

        Dependencies without an explicit toolchain inherit the toolchain of
        the target that depends on them.
        """
        closure = Closure()
        seen: set[TargetBuildKey] = set()
        queue: deque[TargetBuildKey] = deque()

        root_name = parse_target_name(root)
        for build_name in self.project.build_names:
            build = self.project.get_build(build_name)
            key = TargetBuildKey(
                name=root_name.label,
                build=build_name,
                toolchain=root_name.toolchain or build.default_toolchain,
            )
            if key not in seen:
                seen.add(key)
                queue.append(key)

        while queue:
            key = queue.popleft()
            closure.add_key(key)

            target = self.project.get_build(key.build).get_target(key.toolchain, key.name)
            for dep in target.deps:
                dep_name = parse_target_name(dep)
                if self.is_excluded(dep_name.label):
                    logger.debug(f"Skipping excluded dependency {dep} of {key.name}")
                    continue
                dep_key = TargetBuildKey(
                    name=dep_name.label,
                    build=key.build,
                    toolchain=dep_name.toolchain or key.toolchain,
                )
                closure.graph.add_edge(key, dep_key)
                if dep_key not in seen:
                    seen.add(dep_key)
                    queue.append(dep_key)

        logger.debug(
            f"Closure of {root}: {len(closure.keys)} keys, "
            f"{len(closure.logical_names)} logical targets"
        )
        return closure
