"""Shared fixtures: POM/metadata builders, a stub Maven repository app and a fake pool."""

import asyncio
from typing import Dict, List, Optional

import pytest
from aiohttp import web

from fetcher.pool import Result

FAKE_REPO = "https://repo.test/maven2"


def build_pom(group, artifact, version, deps=(), managed=(), plugins=(), parent=None, properties=None):
    """Render a namespaced POM document.

    ``deps``/``managed`` are tuples of (group, artifact, version, scope, optional);
    ``plugins`` are (group, artifact, version); ``parent`` is (group, artifact, version).
    """

    def _dep(g, a, v, scope="", optional=False):
        parts = [f"<groupId>{g}</groupId>", f"<artifactId>{a}</artifactId>"]
        if v:
            parts.append(f"<version>{v}</version>")
        if scope:
            parts.append(f"<scope>{scope}</scope>")
        if optional:
            parts.append("<optional>true</optional>")
        return "<dependency>" + "".join(parts) + "</dependency>"

    body = []
    if parent:
        pg, pa, pv = parent
        body.append(
            f"<parent><groupId>{pg}</groupId><artifactId>{pa}</artifactId>"
            f"<version>{pv}</version></parent>"
        )
    if group:
        body.append(f"<groupId>{group}</groupId>")
    body.append(f"<artifactId>{artifact}</artifactId>")
    if version:
        body.append(f"<version>{version}</version>")
    if properties:
        body.append(
            "<properties>"
            + "".join(f"<{k}>{v}</{k}>" for k, v in properties.items())
            + "</properties>"
        )
    if deps:
        body.append("<dependencies>" + "".join(_dep(*d) for d in deps) + "</dependencies>")
    if managed:
        body.append(
            "<dependencyManagement><dependencies>"
            + "".join(_dep(*d) for d in managed)
            + "</dependencies></dependencyManagement>"
        )
    if plugins:
        rendered = []
        for g, a, v in plugins:
            group_xml = f"<groupId>{g}</groupId>" if g else ""
            rendered.append(
                f"<plugin>{group_xml}<artifactId>{a}</artifactId><version>{v}</version></plugin>"
            )
        body.append("<build><plugins>" + "".join(rendered) + "</plugins></build>")
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<project xmlns="http://maven.apache.org/POM/4.0.0">'
        "<modelVersion>4.0.0</modelVersion>" + "".join(body) + "</project>"
    ).encode("utf-8")


def build_metadata(group, artifact, version="", latest="", release="", versions=()):
    """Render a maven-metadata.xml document."""
    listed = "".join(f"<version>{v}</version>" for v in versions)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f"<metadata><groupId>{group}</groupId><artifactId>{artifact}</artifactId>"
        f"<version>{version}</version><versioning><latest>{latest}</latest>"
        f"<release>{release}</release><versions>{listed}</versions></versioning></metadata>"
    ).encode("utf-8")


def pom_path(group, artifact, version):
    return f"{group.replace('.', '/')}/{artifact}/{version}/{artifact}-{version}.pom"


def meta_path(group, artifact):
    return f"{group.replace('.', '/')}/{artifact}/maven-metadata.xml"


class StubRepository:
    """aiohttp app serving files under several repository prefixes.

    ``files`` maps request paths (e.g. "/a/g/x/1.0/x-1.0.pom") to bodies,
    ``statuses`` forces a status code for a request path and ``delays`` makes
    the handler sleep before answering. Every request path is recorded.
    """

    def __init__(self):
        self.files: Dict[str, bytes] = {}
        self.statuses: Dict[str, int] = {}
        self.delays: Dict[str, float] = {}
        self.hits: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    def add(self, repo: str, path: str, body: bytes) -> None:
        self.files[f"/{repo}/{path}"] = body

    def count(self, path: str) -> int:
        return self.hits.count(path)

    async def _handle(self, request: web.Request) -> web.Response:
        self.hits.append(request.path)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            delay = self.delays.get(request.path)
            if delay:
                await asyncio.sleep(delay)
            status = self.statuses.get(request.path)
            if status is not None:
                return web.Response(status=status)
            body = self.files.get(request.path)
            if body is None:
                return web.Response(status=404)
            return web.Response(body=body, content_type="application/xml")
        finally:
            self.in_flight -= 1

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/{tail:.*}", self._handle)
        return app


class FakePool:
    """In-memory stand-in for FetchPool keyed by repository-relative path."""

    def __init__(self, files: Optional[Dict[str, bytes]] = None, repo: str = FAKE_REPO):
        self.files = dict(files or {})
        self.repo = repo
        self.calls: List[tuple] = []
        self.on_submit = None

    @property
    def submitted(self) -> int:
        return len(self.calls)

    async def submit(self, path: str, repo: str = "") -> Result:
        self.calls.append((path, repo))
        if self.on_submit is not None:
            self.on_submit(path, repo)
        await asyncio.sleep(0)
        if repo and repo != self.repo:
            return Result()
        body = self.files.get(path)
        if body is None:
            return Result()
        return Result(url=f"{self.repo}/{path}", repo=self.repo, data=body)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None


@pytest.fixture
def stub_repo():
    return StubRepository()


@pytest.fixture
def fake_pool():
    return FakePool()
