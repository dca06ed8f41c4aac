"""
Tests for the hosting pipeline: before-routing short circuit, routing,
and the before/after action hooks.
"""

import pytest

from wwwroot.engine import Engine, Router
from wwwroot.faults import RouteConflictFault
from wwwroot.middleware import PipelineMiddleware
from wwwroot.middleware_ext.static import StaticFilesMiddleware
from wwwroot.response import Response

from tests.conftest import make_ctx, read_body


class RecordingStage(PipelineMiddleware):
    """Pipeline stage that records every hook invocation."""

    def __init__(self, label, calls, *, skip_action=False):
        self.label = label
        self.calls = calls
        self.skip_action = skip_action

    async def on_before_routing(self, ctx):
        self.calls.append((self.label, "before_routing"))
        return False

    async def on_before_action(self, ctx, controller_name, action_name):
        self.calls.append((self.label, "before_action", action_name))
        if self.skip_action:
            ctx.response = Response(b"skipped", status=202)
            return True
        return False

    async def on_after_action(self, ctx, action_name, handled):
        self.calls.append((self.label, "after_action", action_name, handled))


def build_engine(www_root=None, stages=()):
    engine = Engine()
    if www_root is not None:
        engine.use(StaticFilesMiddleware(document_root=str(www_root)), priority=10)
    for stage in stages:
        engine.use(stage, priority=20)

    @engine.route("GET", "/api/ping")
    async def ping(ctx):
        return Response.json({"pong": True})

    return engine


class TestRouter:

    def test_duplicate_route_raises(self):
        router = Router()

        async def action(ctx):
            return Response(b"")

        router.add("GET", "/a", action)
        with pytest.raises(RouteConflictFault):
            router.add("get", "/a", action)

    def test_match_and_metadata(self):
        router = Router()

        async def show(ctx):
            return Response(b"")

        router.add("get", "/items", show)
        route = router.match("GET", "/items")
        assert route is not None
        assert route.action_name == "show"
        assert route.controller_name == __name__
        assert router.match("POST", "/items") is None

    def test_head_falls_back_to_get(self):
        router = Router()

        async def show(ctx):
            return Response(b"")

        router.add("GET", "/items", show)
        assert router.match("HEAD", "/items") is not None


class TestEngine:

    @pytest.mark.asyncio
    async def test_static_file_short_circuits_routing(self, www_root):
        calls = []
        engine = build_engine(www_root, [RecordingStage("rec", calls)])
        ctx = make_ctx("/css/site.css")
        resp = await engine.handle(ctx.request, ctx)

        assert resp.status == 200
        assert resp.headers["content-type"] == "text/css; charset=utf-8"
        assert calls == []

    @pytest.mark.asyncio
    async def test_miss_falls_through_to_route(self, www_root):
        calls = []
        engine = build_engine(www_root, [RecordingStage("rec", calls)])
        ctx = make_ctx("/api/ping")
        resp = await engine.handle(ctx.request, ctx)

        assert resp.status == 200
        assert await read_body(resp) == b'{"pong":true}'
        assert calls == [
            ("rec", "before_routing"),
            ("rec", "before_action", "ping"),
            ("rec", "after_action", "ping", False),
        ]

    @pytest.mark.asyncio
    async def test_unknown_path_is_404(self, www_root):
        engine = build_engine(www_root)
        ctx = make_ctx("/notfound.xyz")
        resp = await engine.handle(ctx.request, ctx)
        assert resp.status == 404

    @pytest.mark.asyncio
    async def test_before_action_can_skip_action(self):
        calls = []
        first = RecordingStage("first", calls, skip_action=True)
        second = RecordingStage("second", calls)
        engine = build_engine(None, [first, second])
        ctx = make_ctx("/api/ping")
        resp = await engine.handle(ctx.request, ctx)

        assert resp.status == 202
        assert ("second", "before_action", "ping") not in calls
        assert calls[-2:] == [
            ("second", "after_action", "ping", True),
            ("first", "after_action", "ping", True),
        ]

    @pytest.mark.asyncio
    async def test_static_stage_does_not_interfere_with_actions(self, www_root):
        engine = build_engine(www_root)
        ctx = make_ctx("/api/ping")
        resp = await engine.handle(ctx.request, ctx)
        assert resp.status == 200
        assert resp.headers["content-type"] == "application/json"

    def test_pipeline_middlewares_lists_only_hook_stages(self, www_root):
        async def chain(request, ctx, next):
            return await next(request, ctx)

        engine = build_engine(www_root)
        engine.use(chain)
        stages = engine.pipeline_middlewares
        assert len(stages) == 1
        assert isinstance(stages[0], StaticFilesMiddleware)
