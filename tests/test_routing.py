"""
Express-style Router: path matching, ordering, middleware and error chains.
"""

import pytest

from routewire.application import Application
from routewire.routing import Router, compile_path
from routewire.testing import TestClient


# ============================================================================
# Path compilation
# ============================================================================

class TestCompilePath:

    def test_named_param(self):
        regex, keys = compile_path("/items/:id")
        m = regex.match("/items/7")
        assert m.group("id") == "7"
        assert keys == [("id", "id")]

    def test_end_anchor(self):
        regex, _ = compile_path("/items/:id")
        assert regex.match("/items/7/extra") is None

    def test_trailing_slash_optional(self):
        regex, _ = compile_path("/items")
        assert regex.match("/items/") is not None

    def test_strict_trailing_slash(self):
        regex, _ = compile_path("/items", strict=True)
        assert regex.match("/items/") is None

    def test_case_insensitive_by_default(self):
        regex, _ = compile_path("/Items")
        assert regex.match("/items") is not None
        regex, _ = compile_path("/Items", case_sensitive=True)
        assert regex.match("/items") is None

    def test_optional_param(self):
        regex, _ = compile_path("/files/:name?")
        assert regex.match("/files") is not None
        assert regex.match("/files/a.txt").group("name") == "a.txt"

    def test_wildcard(self):
        regex, keys = compile_path("/static/*")
        assert regex.match("/static/css/site.css").group("_w0") == "css/site.css"
        assert keys == [("_w0", "0")]

    def test_prefix_match_on_segment_boundary(self):
        regex, _ = compile_path("/api", end=False)
        assert regex.match("/api/users") is not None
        assert regex.match("/api") is not None
        assert regex.match("/apiary") is None

    def test_literal_characters_escaped(self):
        regex, _ = compile_path("/v1.0/items")
        assert regex.match("/v1x0/items") is None


# ============================================================================
# Dispatch
# ============================================================================

def app_with(router: Router) -> TestClient:
    app = Application()
    app.use(router)
    return TestClient(app)


class TestRouter:

    @pytest.mark.asyncio
    async def test_first_match_wins(self):
        router = Router()
        router.get("/items/:id", lambda req, res, next: res.send({"route": "param"}))
        router.get("/items/special", lambda req, res, next: res.send({"route": "static"}))
        resp = await app_with(router).get("/items/special")
        assert resp.json() == {"route": "param"}

    @pytest.mark.asyncio
    async def test_params_exposed(self):
        router = Router()
        router.get("/users/:uid/posts/:pid", lambda req, res, next: res.send(dict(req.params)))
        resp = await app_with(router).get("/users/3/posts/9")
        assert resp.json() == {"uid": "3", "pid": "9"}

    @pytest.mark.asyncio
    async def test_verb_mismatch_falls_through_to_404(self):
        router = Router()
        router.post("/items", lambda req, res, next: res.send("created"))
        resp = await app_with(router).get("/items")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "ROUTE_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_handlers_run_in_order(self):
        calls = []

        def first(req, res, next):
            calls.append("first")
            next()

        async def second(req, res, next):
            calls.append("second")
            res.send("done")

        router = Router()
        router.get("/", first, second)
        resp = await app_with(router).get("/")
        assert calls == ["first", "second"]
        assert resp.text == "done"

    @pytest.mark.asyncio
    async def test_next_route_skips_rest_of_route(self):
        router = Router()
        router.get("/x", lambda req, res, next: next("route"), lambda req, res, next: res.send("skipped"))
        router.get("/x", lambda req, res, next: res.send("second route"))
        resp = await app_with(router).get("/x")
        assert resp.text == "second route"

    @pytest.mark.asyncio
    async def test_head_falls_back_to_get(self):
        router = Router()
        router.get("/ping", lambda req, res, next: res.send("pong"))
        resp = await app_with(router).head("/ping")
        assert resp.status_code == 200
        assert resp.body == b""
        assert resp.header("content-length") == "4"

    @pytest.mark.asyncio
    async def test_all_matches_any_verb(self):
        router = Router()
        router.all("/any", lambda req, res, next: res.send(req.method))
        client = app_with(router)
        assert (await client.delete("/any")).text == "DELETE"
        assert (await client.put("/any")).text == "PUT"

    @pytest.mark.asyncio
    async def test_mounted_router_strips_prefix(self):
        seen = {}

        def handler(req, res, next):
            seen.update(path=req.path, base=req.base_url, original=req.original_path)
            res.send("ok")

        api = Router()
        api.get("/users", handler)
        app = Application()
        app.use("/api", api)
        await TestClient(app).get("/api/users")
        assert seen == {"path": "/users", "base": "/api", "original": "/api/users"}

    @pytest.mark.asyncio
    async def test_path_restored_after_mounted_router(self):
        api = Router()
        api.use(lambda req, res, next: next())
        app = Application()
        app.use("/api", api)
        app.get("/api/late", lambda req, res, next: res.send(req.path))
        resp = await TestClient(app).get("/api/late")
        assert resp.text == "/api/late"

    @pytest.mark.asyncio
    async def test_error_skips_regular_handlers(self):
        calls = []

        def fail(req, res, next):
            next(ValueError("bad"))

        def skipped(req, res, next):
            calls.append("skipped")
            next()

        def on_error(err, req, res, next):
            calls.append(type(err).__name__)
            res.status(418).send({"handled": str(err)})

        router = Router()
        router.use(fail)
        router.use(skipped)
        router.get("/", skipped)
        router.use(on_error)
        resp = await app_with(router).get("/")
        assert calls == ["ValueError"]
        assert resp.status_code == 418
        assert resp.json() == {"handled": "bad"}

    @pytest.mark.asyncio
    async def test_raised_exception_forwarded_to_error_handler(self):
        def boom(req, res, next):
            raise KeyError("missing")

        def on_error(err, req, res, next):
            res.status(500).send({"type": type(err).__name__})

        router = Router()
        router.get("/", boom)
        router.use(on_error)
        resp = await app_with(router).get("/")
        assert resp.json() == {"type": "KeyError"}

    @pytest.mark.asyncio
    async def test_error_handler_can_pass_on(self):
        def fail(req, res, next):
            next(RuntimeError("x"))

        def inspect_error(err, req, res, next):
            res.set("x-seen", "1")
            next(err)

        router = Router()
        router.get("/", fail)
        router.use(inspect_error)
        resp = await app_with(router).get("/")
        assert resp.status_code == 500
        assert resp.header("x-seen") == "1"

    def test_unknown_verb_rejected(self):
        with pytest.raises(ValueError):
            Router().route("fetch", "/", lambda req, res, next: None)

    def test_handler_required(self):
        with pytest.raises(TypeError):
            Router().get("/")
        with pytest.raises(TypeError):
            Router().use("/x")

    def test_routes_introspection(self):
        api = Router()
        api.get("/users", lambda req, res, next: None)
        root = Router()
        root.post("/login", lambda req, res, next: None)
        root.use("/api", api)
        assert root.routes() == [("POST", "/login"), ("GET", "/api/users")]
