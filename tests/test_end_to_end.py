"""
End-to-end: decorated controllers served through the full stack.
"""

import asyncio
from unittest.mock import MagicMock

import httpx
import pytest

from routewire.constants import ParameterType
from routewire.controller import (
    ControllerMetadata,
    MethodMetadata,
    ParameterMetadata,
    bind,
    controller,
    http_get,
    http_post,
    query_param,
    request_body,
    request_param,
)
from routewire.di import Container
from routewire.server import RoutewireServer
from routewire.testing import TestClient


class ItemStore:
    def __init__(self):
        self.items = {"7": {"id": "7", "name": "widget"}}

    def find(self, item_id):
        return self.items.get(item_id)

    def add(self, data):
        item_id = str(len(self.items) + 10)
        self.items[item_id] = {"id": item_id, **data}
        return self.items[item_id]


def require_token(req, res, next):
    if req.get("x-token") != "secret":
        res.status(401).send({"error": "unauthorized"})
        return
    next()


@controller("/shop", "require-token")
class ShopController:
    def __init__(self, store: ItemStore):
        self.store = store

    @http_get("/items/:id")
    @bind(request_param("id"))
    def get_item(self, item_id, req, res, next):
        return self.store.find(item_id) or res.status(404).send({"missing": item_id})

    @http_get("/search")
    @bind(query_param("q"))
    async def search(self, q, req, res, next):
        await asyncio.sleep(0)
        return {"q": q}

    @http_post("/items")
    @bind(request_body())
    def create(self, body, req, res, next):
        res.status(201)
        return self.store.add(body)


@pytest.fixture
def shop_server():
    container = Container()
    container.bind(ItemStore, scope="singleton")
    container.bind_value("require-token", require_token)
    container.bind_controller(ShopController)
    return RoutewireServer(container)


# ============================================================================
# Builder-registered controller (the canonical scenario)
# ============================================================================

class TestItemsScenario:

    @pytest.mark.asyncio
    async def test_get_item_by_id(self, registry):
        calls = MagicMock()

        class ItemsController:
            def getOne(self, item_id, req, res, next):
                calls(item_id, req, res, next)
                return {"id": item_id}

        registry.register(
            ControllerMetadata(ItemsController, "/items"),
            methods=[MethodMetadata("get", "/:id", "getOne")],
            parameters={"getOne": [ParameterMetadata(0, ParameterType.PARAMS, "id")]},
        )
        container = Container()
        container.bind_controller(ItemsController)

        resp = await TestClient(RoutewireServer(container, registry=registry)).get("/items/7")

        assert resp.status_code == 200
        assert resp.json() == {"id": "7"}
        calls.assert_called_once()
        item_id, req, res, nxt = calls.call_args.args
        assert item_id == "7"
        assert req.params == {"id": "7"}
        assert res.headers_sent is True
        assert callable(nxt)


# ============================================================================
# Decorated controller
# ============================================================================

class TestShop:

    @pytest.mark.asyncio
    async def test_middleware_from_container_guards_routes(self, shop_server):
        resp = await TestClient(shop_server).get("/shop/items/7")
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_get_item(self, shop_server):
        client = TestClient(shop_server, default_headers={"x-token": "secret"})
        resp = await client.get("/shop/items/7")
        assert resp.json() == {"id": "7", "name": "widget"}

    @pytest.mark.asyncio
    async def test_method_sends_its_own_404(self, shop_server):
        client = TestClient(shop_server, default_headers={"x-token": "secret"})
        resp = await client.get("/shop/items/999")
        assert resp.status_code == 404
        assert resp.json() == {"missing": "999"}

    @pytest.mark.asyncio
    async def test_async_method_with_query(self, shop_server):
        client = TestClient(shop_server, default_headers={"x-token": "secret"})
        assert (await client.get("/shop/search?q=bolts")).json() == {"q": "bolts"}
        # Missing query value binds None
        assert (await client.get("/shop/search")).json() == {"q": None}

    @pytest.mark.asyncio
    async def test_post_body(self, shop_server):
        client = TestClient(shop_server, default_headers={"x-token": "secret"})
        resp = await client.post("/shop/items", json={"name": "gear"})
        assert resp.status_code == 201
        assert resp.json()["name"] == "gear"

        # Singleton store shared across per-request controller instances
        resp = await client.get(f"/shop/items/{resp.json()['id']}")
        assert resp.json()["name"] == "gear"


# ============================================================================
# Through httpx
# ============================================================================

class TestHttpxTransport:

    @pytest.mark.asyncio
    async def test_served_over_asgi_transport(self, shop_server):
        transport = httpx.ASGITransport(app=shop_server.build())
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
            resp = await client.get("/shop/items/7", headers={"x-token": "secret"})
            missing = await client.get("/nowhere")

        assert resp.status_code == 200
        assert resp.json() == {"id": "7", "name": "widget"}
        assert missing.status_code == 404
        assert missing.json()["error"]["code"] == "ROUTE_NOT_FOUND"


# ============================================================================
# Request-scoped controllers
# ============================================================================

class TestRequestScopedController:

    @pytest.mark.asyncio
    async def test_each_request_gets_its_own_controller(self, registry):
        created = []

        class CounterController:
            def __init__(self):
                created.append(self)

            def show(self, req, res, next):
                return {"instance": len(created)}

        registry.register(
            ControllerMetadata(CounterController, "/c"),
            methods=[MethodMetadata("get", "", "show")],
        )
        container = Container()
        container.bind_controller(CounterController, scope="request")
        client = TestClient(RoutewireServer(container, registry=registry))

        first = (await client.get("/c")).json()
        second = (await client.get("/c")).json()
        assert first != second
        assert second["instance"] == first["instance"] + 1
