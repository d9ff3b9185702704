import asyncio

from aiohttp import test_utils, web

from enum_tool.enumerator import COMMON_DIRECTORIES, EnumerationSession, run_enumeration
from enum_tool.fetcher import Fetcher
from enum_tool.report import Reporter

from conftest import FakeFetcher

ROOT = "http://h.com/"
LISTING = "<title>Index of /admin</title><h1>Index of /admin</h1>"


def enumerate_tree(fetcher, reporter, max_depth=3, root=ROOT):
    session = EnumerationSession(fetcher, reporter, max_depth, root)
    return asyncio.run(session.run())


def test_linked_directory_is_known_and_recursed(reporter):
    fetcher = FakeFetcher(pages={
        ROOT: '<a href="docs/">Docs</a>',
        "http://h.com/docs/": "<p>documentation</p>",
    })
    session = enumerate_tree(fetcher, reporter)

    hits = {(h.name, h.source, h.depth) for h in session.results}
    assert hits == {("docs/", "link", 0)}
    # known directories are never probed for a status code
    assert "http://h.com/docs/" not in fetcher.status_calls
    # the recursive call targets the resolved URL at depth 1
    assert "http://h.com/docs/" in session.visited
    assert ("Enumerating: http://h.com/docs/", 1) in [(l.text, l.depth) for l in reporter.lines]


def test_every_dictionary_entry_is_probed_once_per_level(reporter):
    fetcher = FakeFetcher(pages={ROOT: "<p>hello</p>"})
    session = enumerate_tree(fetcher, reporter, max_depth=0)

    probed = [u for u in fetcher.calls if u != ROOT and "__enum_nonce_" not in u]
    assert sorted(probed) == sorted("http://h.com/" + d for d in COMMON_DIRECTORIES)
    assert session.results == []


def test_max_depth_zero_does_not_recurse(reporter):
    fetcher = FakeFetcher(pages={
        ROOT: '<a href="docs/">Docs</a>',
        "http://h.com/admin/": LISTING,
    })
    session = enumerate_tree(fetcher, reporter, max_depth=0)

    assert {h.name for h in session.results} == {"docs/", "admin/"}
    assert list(session.visited) == [ROOT]
    # nothing under the found directories was fetched
    assert not any(u.startswith("http://h.com/docs/") for u in fetcher.calls)
    assert fetcher.calls.count("http://h.com/admin/") == 1


def test_accepted_probe_is_reported_and_recursed(reporter):
    fetcher = FakeFetcher(pages={
        ROOT: "<p>home</p>",
        "http://h.com/admin/": LISTING,
    })
    session = enumerate_tree(fetcher, reporter, max_depth=1)

    probe_hits = [h for h in session.results if h.source == "probe"]
    assert [h.url for h in probe_hits] == ["http://h.com/admin/"]
    assert probe_hits[0].signals.score == 5
    assert "[ OK ] admin/  (not404 statusOK dirPattern titleOK notRedirect)" in reporter.texts()
    assert "http://h.com/admin/" in session.visited
    assert "Enumerating: http://h.com/admin/" in reporter.texts()


def test_link_cycle_is_visited_once(reporter):
    fetcher = FakeFetcher(pages={
        ROOT: '<a href="sub/">s</a>',
        "http://h.com/sub/": '<a href="http://h.com/sub/">self</a><a href="http://h.com/">up</a>',
    })
    enumerate_tree(fetcher, reporter, max_depth=5)
    assert fetcher.calls.count("http://h.com/sub/") == 1
    assert fetcher.calls.count(ROOT) == 1


def test_unreachable_root_reports_no_response(reporter):
    fetcher = FakeFetcher(not_found="")
    session = enumerate_tree(fetcher, reporter)
    assert reporter.texts() == ["Enumerating: http://h.com/", "(No response or empty)"]
    assert session.failed == [ROOT]
    assert fetcher.calls == [ROOT]


def test_indentation_follows_depth(reporter):
    fetcher = FakeFetcher(pages={ROOT: '<a href="a/">a</a>', "http://h.com/a/": "<p>a</p>"})
    enumerate_tree(fetcher, reporter, max_depth=1)
    rendered = [l.render() for l in reporter.lines]
    assert "Enumerating: http://h.com/" in rendered
    assert "  Enumerating: http://h.com/a/" in rendered


def test_sessions_do_not_share_state(reporter, context):
    pages = {ROOT: "<p>home</p>"}
    first = FakeFetcher(pages=pages)
    second = FakeFetcher(pages=pages)

    async def go():
        a = await run_enumeration(ROOT, context, reporter=reporter, fetcher=first)
        b = await run_enumeration(ROOT, context, reporter=reporter, fetcher=second)
        return a, b

    a, b = asyncio.run(go())
    assert a.visited is not b.visited
    assert a.baselines is not b.baselines
    assert second.calls[0] == ROOT


def test_run_enumeration_uses_configured_depth(reporter, context):
    context.max_enum_depth = 0
    fetcher = FakeFetcher(pages={ROOT: '<a href="docs/">d</a>', "http://h.com/docs/": "<p>d</p>"})
    session = asyncio.run(run_enumeration(ROOT, context, reporter=reporter, fetcher=fetcher))
    assert session.max_depth == 0
    assert "http://h.com/docs/" not in fetcher.calls


def test_probe_error_does_not_abort_level(reporter):
    class Flaky(FakeFetcher):
        async def fetch(self, url, cookies=None, user_agent=None):
            if url.endswith("/backup/"):
                raise RuntimeError("boom")
            return await super().fetch(url, cookies, user_agent)

    fetcher = Flaky(pages={ROOT: "<p>home</p>", "http://h.com/admin/": LISTING})
    session = enumerate_tree(fetcher, reporter, max_depth=0)
    assert [h.name for h in session.results] == ["admin/"]
    assert any("probe backup/ failed" in t for t in reporter.texts("ERROR"))


def test_classification_finishes_before_recursion(reporter):
    class Ordered(FakeFetcher):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            self.order = []

        async def fetch(self, url, cookies=None, user_agent=None):
            self.order.append(("fetch", url))
            return await super().fetch(url, cookies, user_agent)

        async def fetch_status(self, url):
            self.order.append(("status", url))
            return await super().fetch_status(url)

    fetcher = Ordered(pages={
        ROOT: '<a href="docs/">Docs</a>',
        "http://h.com/docs/": "<p>d</p>",
    })
    enumerate_tree(fetcher, reporter, max_depth=1)

    first_branch = fetcher.order.index(("fetch", "http://h.com/docs/"))
    level_zero = {"http://h.com/" + d for d in COMMON_DIRECTORIES}
    probes = [i for i, (_, url) in enumerate(fetcher.order) if url in level_zero]
    # every dictionary entry was fetched and asked for its status
    assert len(probes) == 2 * len(COMMON_DIRECTORIES)
    assert max(probes) < first_branch


def test_redirecting_server_yields_no_probe_hits(context):
    async def home(request):
        return web.Response(text="<html><head><title>Home</title></head><body>welcome</body></html>",
                            content_type="text/html")

    async def bounce(request):
        return web.Response(status=302, headers={"Location": "/"})

    app = web.Application()
    app.router.add_get("/", home)
    app.router.add_get("/{tail:.+}", bounce)

    async def go():
        server = test_utils.TestServer(app)
        await server.start_server()
        try:
            root = str(server.make_url("/"))
            reporter = Reporter(no_color=True, quiet=True)
            async with Fetcher(context, reporter) as fetcher:
                session = EnumerationSession(fetcher, reporter, 0, root)
                return await session.run()
        finally:
            await server.close()

    session = asyncio.run(go())
    assert session.results == []
    assert session.failed == []
