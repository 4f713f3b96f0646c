"""End-to-end runs of find_poms against a stub repository server."""

import asyncio
import io

import aiohttp.test_utils

from cli_config import Settings
from conftest import build_metadata, build_pom, meta_path, pom_path
from fetcher.pool import FetchPool
from pomfinder import find_poms


def _base(ts, name):
    return f"http://{ts.host}:{ts.port}/{name}"


def _populate_tree(stub_repo):
    stub_repo.add("a", pom_path("g", "a", "1.0"), build_pom("g", "a", "1.0", deps=(
        ("g", "b", "1.0", "runtime", False),
        ("g", "c", "1.0", "", False),
        ("g", "junit", "4.0", "test", False),
        ("g", "opt", "1.0", "", True),
    )))
    stub_repo.add("a", pom_path("g", "b", "1.0"), build_pom("g", "b", "1.0"))
    stub_repo.add("a", pom_path("g", "c", "1.0"), build_pom("g", "c", "1.0"))


def _run(stub_repo, text, names=("a", "b"), **settings):
    out = io.StringIO()

    async def _go():
        async with aiohttp.test_utils.TestServer(stub_repo.app()) as ts:
            bases = {n: _base(ts, n) for n in names}
            repos = tuple(bases.values())
            opts = Settings(repositories=repos, workers=4, retries=1, retry_delay=0, timeout=5, **settings)
            pool = FetchPool(repos, workers=4, timeout=5, retries=1, retry_delay=0)
            finder = await find_poms(io.StringIO(text), opts, output=out, pool=pool)
            return bases, finder

    bases, finder = asyncio.run(_go())
    return bases, finder, out.getvalue().splitlines()


def test_recursive_run_prints_every_pom(stub_repo):
    _populate_tree(stub_repo)
    bases, finder, lines = _run(stub_repo, "g:a:1.0\n")
    assert sorted(lines) == sorted(
        f"{bases['a']}/{pom_path('g', x, '1.0')}" for x in ("a", "b", "c")
    )
    assert not finder.failed
    assert stub_repo.count(f"/a/{pom_path('g', 'junit', '4.0')}") == 0
    assert stub_repo.count(f"/a/{pom_path('g', 'opt', '1.0')}") == 0


def test_non_recursive_run_prints_only_input(stub_repo):
    _populate_tree(stub_repo)
    bases, _, lines = _run(stub_repo, "g:a:1.0\n", recursive=False)
    assert lines == [f"{bases['a']}/{pom_path('g', 'a', '1.0')}"]


def test_unknown_version_uses_repo_with_metadata(stub_repo):
    stub_repo.add("b", meta_path("org.x", "lib"), build_metadata("org.x", "lib", latest="2.0"))
    stub_repo.add("b", pom_path("org.x", "lib", "2.0"), build_pom("org.x", "lib", "2.0"))
    bases, finder, lines = _run(stub_repo, "org.x:lib:\n")
    assert lines == [f"{bases['b']}/{pom_path('org.x', 'lib', '2.0')}"]
    assert not finder.failed
    assert stub_repo.count(f"/a/{pom_path('org.x', 'lib', '2.0')}") == 0
    assert stub_repo.count(f"/a/{meta_path('org.x', 'lib')}") == 1


def test_malformed_line_is_skipped(stub_repo, caplog):
    _populate_tree(stub_repo)
    with caplog.at_level("ERROR"):
        bases, finder, lines = _run(stub_repo, "not-a-coordinate\n\ng:b:1.0\n")
    assert lines == [f"{bases['a']}/{pom_path('g', 'b', '1.0')}"]
    assert not finder.failed
    assert any("not-a-coordinate" in r.getMessage() for r in caplog.records)


def test_missing_dependency_marks_run_failed(stub_repo):
    _populate_tree(stub_repo)
    _, finder, lines = _run(stub_repo, "g:b:1.0\ng:nope:9\n")
    assert len(lines) == 1
    assert finder.failed
    assert [d.id() for d, _ in finder.failures] == ["g:nope:9"]
