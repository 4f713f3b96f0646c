"""Worker pool doing the HTTP requests to Maven repositories.

Opening a connection per dependency quickly runs into the open-files limit
on large trees, so every request goes through a fixed number of workers that
drain one bounded queue. Submitting blocks while the queue is full.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import aiohttp

from common import http_client
from common.logging_utils import extra_context, is_debug_enabled, safe_url
from constants import Constants
from errors import ConfigError, NetworkError

logger = logging.getLogger(__name__)


@dataclass
class Result:
    """Outcome of a job; all fields are empty if no repository had the file."""

    url: str = ""
    repo: str = ""
    data: bytes = b""

    @property
    def found(self) -> bool:
        return self.url != ""

    def __str__(self) -> str:
        return f"<Result Url={self.url} >"


@dataclass
class Job:
    """A path to look up and the one-shot future its Result is posted to."""

    result: asyncio.Future
    path: str
    repo: str = ""  # when set, only this repository is tried


class FetchPool:
    """Fixed set of workers fetching paths from a list of repositories.

    Use as an async context manager, or call ``start()`` and ``stop()``.
    """

    def __init__(
        self,
        repos: Sequence[str],
        workers: int = Constants.WORKERS,
        timeout: float = Constants.HTTP_TIMEOUT,
        retries: int = Constants.HTTP_RETRIES,
        retry_delay: float = Constants.HTTP_RETRY_DELAY_SEC,
    ):
        """Initialize the pool.

        Args:
            repos: Repository base URLs, tried in order.
            workers: Number of workers and capacity of the job queue.
            timeout: Timeout in seconds for a single HTTP attempt.
            retries: Attempts per repository on non-404 errors.
            retry_delay: Seconds to wait between attempts.
        """
        if workers < 1:
            raise ConfigError(f"worker count must be positive, got {workers}")
        if not repos:
            raise ConfigError("at least one repository is required")
        self._repos: List[str] = [repo.rstrip("/") for repo in repos]
        self._limit = workers
        self._timeout = timeout
        self._retries = max(1, retries)
        self._retry_delay = retry_delay
        self._queue: Optional[asyncio.Queue] = None
        self._session: Optional[aiohttp.ClientSession] = None
        self._workers: List[asyncio.Task] = []
        self.submitted = 0

    @property
    def repos(self) -> List[str]:
        return list(self._repos)

    @property
    def limit(self) -> int:
        return self._limit

    async def start(self) -> None:
        """Open the HTTP session and start the workers."""
        if self._workers:
            return
        self._queue = asyncio.Queue(maxsize=self._limit)
        self._session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self._timeout),
            connector=aiohttp.TCPConnector(limit=self._limit),
            headers={"User-Agent": Constants.USER_AGENT},
        )
        self._workers = [
            asyncio.create_task(self._worker(), name=f"fetch-worker-{i}")
            for i in range(self._limit)
        ]
        logger.debug("Started %d fetch workers for %d repos", self._limit, len(self._repos))

    async def stop(self) -> None:
        """Cancel the workers and close the HTTP session."""
        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def submit(self, path: str, repo: str = "") -> Result:
        """Queue a lookup of ``path`` and wait for its Result.

        Args:
            path: Repository-relative path of the file.
            repo: Only try this repository instead of the whole list.

        Returns:
            Result: The found file, or an empty Result if no repo had it.
        """
        if self._queue is None:
            raise RuntimeError("fetch pool is not started")
        job = Job(asyncio.get_running_loop().create_future(), path, repo)
        self.submitted += 1
        await self._queue.put(job)
        return await job.result

    async def _worker(self) -> None:
        assert self._queue is not None
        while True:
            job = await self._queue.get()
            try:
                repos = [job.repo.rstrip("/")] if job.repo else self._repos
                result = await self._try_repos(job.path, repos)
            except asyncio.CancelledError:
                job.result.cancel()
                raise
            except Exception as exc:  # pylint: disable=broad-exception-caught
                logger.error("fetch worker failed on %s: %s", job.path, exc, exc_info=True)
                if not job.result.done():
                    job.result.set_exception(exc)
            else:
                if not job.result.done():
                    job.result.set_result(result)
            finally:
                self._queue.task_done()

    async def _try_repos(self, path: str, repos: Sequence[str]) -> Result:
        for repo in repos:
            try:
                return await self._try_repo(repo, path)
            except NetworkError as exc:
                if is_debug_enabled(logger):
                    logger.debug(
                        "Repository miss",
                        extra=extra_context(
                            event="repo_miss",
                            component="fetcher",
                            action="try_repo",
                            status_code=exc.status,
                            target=safe_url(exc.url),
                        ),
                    )
        return Result()

    async def _try_repo(self, repo: str, path: str) -> Result:
        url = f"{repo}/{path}"
        data = await self._retry_fetch(url)
        return Result(url=url, repo=repo, data=data)

    async def _retry_fetch(self, url: str) -> bytes:
        assert self._session is not None
        status: Optional[int] = None
        reason = ""
        for attempt in range(1, self._retries + 1):
            try:
                status, body = await http_client.get_bytes(self._session, url)
                reason = ""
            except NetworkError as exc:
                status, reason = None, exc.reason
            if status == 200:
                return body
            # 404 must mean it doesn't exist.
            if status == 404:
                break
            # Any other outcome might be a transient issue.
            if attempt < self._retries:
                logger.warning(
                    "retrying %d/%d due to status: %s, url: %s",
                    attempt,
                    self._retries,
                    status if status is not None else reason,
                    safe_url(url),
                )
                await asyncio.sleep(self._retry_delay)
        raise NetworkError(url, status=status, reason=reason)

    async def __aenter__(self) -> "FetchPool":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()
