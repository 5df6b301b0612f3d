"""
Concurrent construction of a GnProject snapshot.

Every target is described by an injected query (normally a wrapper around
`gn desc out/<build> <target> --all-toolchains --format=json`). Descriptions
are requested recursively across dependencies, one query per distinct name
per build, with requests for names already in flight coalesced onto the
pending future.

Usage:
    fetcher = SnapshotFetcher(query, max_concurrency=8)
    project = fetcher.fetch(["debug", "release"])
"""

import logging
import threading
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import Any, Callable

from gn2gyp.errors import SnapshotFetchError
from gn2gyp.gn.project import TARGET_ALL, GnBuild, GnProject

logger = logging.getLogger(__name__)

# (build, target) -> {target name: raw GN fields}, one entry per toolchain variant.
TargetQuery = Callable[[str, str], dict[str, Any]]


class _BuildCrawl:
    """Tracks the in-flight descriptions for one build during one fetch."""

    def __init__(
        self,
        build: str,
        query: TargetQuery,
        executor: ThreadPoolExecutor,
        limiter: threading.Semaphore,
    ):
        self.build = build
        self._query = query
        self._executor = executor
        self._limiter = limiter
        self._lock = threading.Lock()
        self._in_flight: dict[str, Future] = {}

    def request(self, target: str) -> Future:
        """Get the pending description of a target, starting a query only if none exists."""
        with self._lock:
            future = self._in_flight.get(target)
            if future is None:
                future = self._executor.submit(self._describe, target)
                self._in_flight[target] = future
            return future

    def futures(self) -> list[Future]:
        with self._lock:
            return list(self._in_flight.values())

    def _describe(self, target: str) -> dict[str, Any]:
        with self._limiter:
            logger.debug(f"Describing {target} in {self.build}")
            try:
                description = self._query(self.build, target)
            except Exception as e:
                raise SnapshotFetchError(
                    f"Failed to describe {target} in build {self.build}: {e}"
                ) from e

        if not isinstance(description, dict) or target not in description:
            raise SnapshotFetchError(
                f"Description of {target} in build {self.build} doesn't contain the target"
            )

        # Children are registered before this future completes, so once every
        # known future is done the crawl is complete.
        for variant in description.values():
            for dep in variant.get("deps", []):
                self.request(dep)
        return description

    def collect(self) -> dict[str, Any]:
        """Merge all descriptions into one name -> fields mapping."""
        merged: dict[str, Any] = {}
        for target in sorted(self._in_flight):
            merged.update(self._in_flight[target].result())
        return merged


class SnapshotFetcher:
    """Builds a GnProject by querying target descriptions concurrently."""

    def __init__(
        self,
        query: TargetQuery,
        max_concurrency: int = 8,
        limiter: threading.Semaphore | None = None,
    ):
        """
        Initialize the fetcher.

        Args:
            query: Callable returning the raw description of a target in a build
            max_concurrency: Worker threads available for queries
            limiter: Optional semaphore capping simultaneous queries; defaults
                to one sized by max_concurrency
        """
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be positive, got {max_concurrency}")
        self.query = query
        self.max_concurrency = max_concurrency
        self.limiter = limiter or threading.BoundedSemaphore(max_concurrency)

    def fetch(self, builds: list[str], root: str = TARGET_ALL) -> GnProject:
        """
        Describe every target reachable from `root` in every build.

        Raises:
            SnapshotFetchError: If any query fails; no partial project is returned
        """
        executor = ThreadPoolExecutor(max_workers=self.max_concurrency)
        try:
            crawls = [_BuildCrawl(build, self.query, executor, self.limiter) for build in builds]
            for crawl in crawls:
                crawl.request(root)
            self._wait_for(crawls)
        except BaseException:
            executor.shutdown(wait=True, cancel_futures=True)
            raise
        executor.shutdown(wait=True)

        project = GnProject()
        for crawl in crawls:
            described = crawl.collect()
            logger.info(f"Described {len(described)} targets in build {crawl.build}")
            project.add_build(crawl.build, GnBuild.from_dict(described))
        return project

    def _wait_for(self, crawls: list[_BuildCrawl]) -> None:
        while True:
            futures = [future for crawl in crawls for future in crawl.futures()]
            for future in futures:
                if future.done() and future.exception() is not None:
                    error = future.exception()
                    if isinstance(error, SnapshotFetchError):
                        raise error
                    raise SnapshotFetchError(f"Target description failed: {error}") from error

            pending = [future for future in futures if not future.done()]
            if not pending:
                # The in-flight tables only grow; if nothing was added while we
                # looked, everything reachable has been described.
                if sum(len(crawl.futures()) for crawl in crawls) == len(futures):
                    return
                continue
            wait(pending, return_when=FIRST_EXCEPTION)
