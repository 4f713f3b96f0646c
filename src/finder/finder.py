"""Recursive search for POM URLs of a dependency and its dependencies."""

from __future__ import annotations

import asyncio
import logging
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, TextIO, Tuple

from common.logging_utils import extra_context, is_debug_enabled
from constants import Constants, Scopes
from errors import MetadataNotFound, PomFinderError, PomNotFound
from fetcher.pool import FetchPool, Result
from pom.dependency import Dependency
from pom.metadata import Metadata
from pom.project import Project

logger = logging.getLogger(__name__)


class NodeState(Enum):
    """Progress of a single dependency through the finder."""

    UNSEEN = "unseen"
    CLAIMED = "claimed"
    VERSION_RESOLVING = "version_resolving"
    DESCRIPTOR_FETCHING = "descriptor_fetching"
    PARSED = "parsed"
    EXPANDING = "expanding"
    DONE = "done"
    FAILED = "failed"


@dataclass
class FinderOptions:
    """Options for handling dependencies."""

    ignore_scopes: Sequence[str] = field(
        default_factory=lambda: list(Constants.DEFAULT_IGNORE_SCOPES)
    )
    ignore_optional: bool = True
    ignore_transitive: bool = True  # managed dependencies can often be ignored
    recursive_search: bool = True
    pom_attempts: int = Constants.POM_FETCH_ATTEMPTS
    pom_retry_delay: float = Constants.POM_RETRY_DELAY_SEC


class Finder:
    """Finds POM URLs for dependencies, following sub-dependencies.

    Every ``resolve()`` call spawns a task on the running event loop. Call
    ``wait()`` to block until all of them, and the ones they spawned, are done.
    """

    def __init__(
        self,
        opts: FinderOptions,
        fetchers: FetchPool,
        output: Optional[TextIO] = None,
    ):
        self.opts = opts
        self.fetchers = fetchers
        self._output = output
        self._deps: Dict[str, bool] = {}  # to avoid checking the same dep
        self._states: Dict[str, NodeState] = {}
        self._outstanding = 0
        self._idle = asyncio.Event()
        self._idle.set()
        self._tasks: set = set()
        self._failed = False
        self.urls: List[str] = []
        self.failures: List[Tuple[Dependency, PomFinderError]] = []

    @property
    def failed(self) -> bool:
        """True if any dependency could not be resolved."""
        return self._failed

    @property
    def outstanding(self) -> int:
        """Number of resolve() calls that have not finished yet."""
        return self._outstanding

    def state(self, dep: Dependency) -> NodeState:
        return self._states.get(dep.id(), NodeState.UNSEEN)

    def resolve(self, dep: Dependency) -> None:
        """Start looking up ``dep`` in the background.

        Must be called from a coroutine running on the event loop.
        """
        self._outstanding += 1
        self._idle.clear()
        task = asyncio.get_running_loop().create_task(self._find_urls(dep))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def wait(self) -> None:
        """Block until every resolve() call, including recursive ones, is done."""
        await self._idle.wait()

    def lock_dep(self, dep: Dependency) -> bool:
        """Claim a dependency; False if it was already claimed this run.

        There is no suspension point between the check and the insert, so no
        other task can interleave.
        """
        dep_id = dep.id()
        if self._deps.get(dep_id):
            return False
        self._deps[dep_id] = True
        self._states[dep_id] = NodeState.CLAIMED
        return True

    def is_excluded(self, dep: Dependency) -> bool:
        """Check if a sub-dependency should not be followed."""
        if dep.transitive:
            if self.opts.ignore_transitive:
                return True
            # Unscoped transitive deps are mostly useless trash.
            if dep.scope in ("", Scopes.NONE.value):
                return True
        # Check if the scope matches any of the ignored ones.
        if dep.scope in self.opts.ignore_scopes:
            return True
        # Else just check if it's optional.
        return self.opts.ignore_optional and dep.optional

    def _set_state(self, dep_id: str, state: NodeState) -> None:
        self._states[dep_id] = state
        if is_debug_enabled(logger):
            logger.debug(
                "Dependency state change",
                extra=extra_context(
                    event="state_change",
                    component="finder",
                    action=state.value,
                    target=dep_id,
                ),
            )

    def _done(self) -> None:
        self._outstanding -= 1
        if self._outstanding == 0:
            self._idle.set()

    async def _find_urls(self, dep: Dependency) -> None:
        try:
            # Check if the dependency is being checked or was already found.
            if not self.lock_dep(dep):
                return
            await self._process(dep)
        finally:
            self._done()

    async def _process(self, dep: Dependency) -> None:
        claimed_id = dep.id()
        try:
            found = await self.resolve_dep(dep, claimed_id)
        except PomFinderError as exc:
            self._fail(dep, claimed_id, exc)
            return
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.error("unexpected failure for: %s", dep, exc_info=True)
            self._fail(dep, claimed_id, PomFinderError(f"unexpected error: {exc}"))
            return

        if found is None:
            # The resolved version is handled by whoever claimed it.
            self._set_state(claimed_id, NodeState.DONE)
            return
        url, project = found
        dep_id = dep.id()

        self._emit(url)

        if self.opts.recursive_search:
            # Now that we have the POM we can check all the sub-dependencies.
            self._set_state(dep_id, NodeState.EXPANDING)
            for sub_dep in project.get_dependencies():
                if self.is_excluded(sub_dep):
                    continue
                self.resolve(sub_dep)
        self._set_state(dep_id, NodeState.DONE)
        if claimed_id != dep_id:
            self._set_state(claimed_id, NodeState.DONE)

    async def resolve_dep(
        self, dep: Dependency, dep_id: Optional[str] = None
    ) -> Optional[Tuple[str, Project]]:
        """Find the POM URL of ``dep`` and parse the POM.

        Resolves the version from repository metadata first if the
        dependency doesn't name one. The resolved coordinate is claimed as
        well; None is returned if it was already claimed this run.

        Raises:
            MetadataNotFound: If the version could not be resolved.
            PomNotFound: If no repository had the POM.
            DocumentFormatError: If a fetched document is not valid XML.
        """
        dep_id = dep_id or dep.id()
        repo = ""
        if not dep.has_version():
            self._set_state(dep_id, NodeState.VERSION_RESOLVING)
            rval = await self.fetchers.submit(dep.get_meta_path())
            if not rval.found:
                raise MetadataNotFound(f"no metadata found: {dep.get_meta_path()}")
            meta = Metadata.from_bytes(rval.data)
            version = meta.get_latest()
            if not version:
                raise MetadataNotFound(f"no version in metadata: {rval.url}")
            dep.version = version
            if not self.lock_dep(dep):
                return None
            dep_id = dep.id()
            # The repo that had the metadata most likely has the POM too.
            repo = rval.repo

        self._set_state(dep_id, NodeState.DESCRIPTOR_FETCHING)
        rval = await self._fetch_pom(dep, repo)
        if not rval.found:
            raise PomNotFound(f"no pom data: {dep.get_pom_path()}")

        project = Project.from_bytes(rval.data)
        self._set_state(dep_id, NodeState.PARSED)
        return rval.url, project

    async def _fetch_pom(self, dep: Dependency, repo: str) -> Result:
        path = dep.get_pom_path()
        rval = Result()
        for attempt in range(max(1, self.opts.pom_attempts)):
            if attempt > 0:
                await asyncio.sleep(self.opts.pom_retry_delay)
            if repo:
                rval = await self.fetchers.submit(path, repo)
                if rval.found:
                    return rval
            rval = await self.fetchers.submit(path)
            if rval.found:
                return rval
        return rval

    def _emit(self, url: str) -> None:
        self.urls.append(url)
        # This is what shows the found URL in STDOUT.
        out = self._output if self._output is not None else sys.stdout
        print(url, file=out, flush=True)

    def _fail(self, dep: Dependency, dep_id: str, exc: PomFinderError) -> None:
        logger.error("error: '%s' for: %s", exc, dep)
        self._set_state(dep_id, NodeState.FAILED)
        if dep.id() != dep_id:
            self._set_state(dep.id(), NodeState.FAILED)
        self.failures.append((dep, exc))
        self._failed = True
