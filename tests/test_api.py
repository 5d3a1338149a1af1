"""HTTP API: login cookie, items and tags endpoints, uniform 401s."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

from backend.app.models import Item, items_tags
from tests._db import PASSWORD_A, PASSWORD_B, count_rows, login

FP = "0123456789abcdef"


class TestLogin:
    async def test_sets_http_only_cookie(self, client: AsyncClient, catalogs) -> None:
        resp = await client.post("/api/v1/auth/login", json={"password": PASSWORD_A})
        assert resp.status_code == 200
        assert resp.json() == {"success": True}
        set_cookie = resp.headers["set-cookie"]
        assert set_cookie.startswith("token=")
        assert "HttpOnly" in set_cookie
        assert "Path=/" in set_cookie
        assert "Max-Age=8640000" in set_cookie

    async def test_cookie_identifies_catalog(self, client, catalogs, authenticator) -> None:
        a, _ = catalogs
        await login(client, PASSWORD_A)
        claim = authenticator.validate(client.cookies["token"])
        assert authenticator.extract_catalog_id(claim) == a.id
        assert claim.catalog_name == "Catalog A"

    async def test_wrong_password(self, client, catalogs) -> None:
        resp = await client.post("/api/v1/auth/login", json={"password": "nope"})
        assert resp.status_code == 401
        assert resp.json() == {"detail": "Unauthorized"}
        assert "token" not in resp.cookies

    async def test_empty_password_is_rejected(self, client, catalogs) -> None:
        resp = await client.post("/api/v1/auth/login", json={"password": ""})
        assert resp.status_code == 422

    async def test_logout_clears_cookie(self, client, catalogs) -> None:
        await login(client, PASSWORD_A)
        resp = await client.post("/api/v1/auth/logout")
        assert resp.status_code == 200
        assert "token" not in client.cookies
        assert (await client.get("/api/v1/items/")).status_code == 401


class TestUnauthorized:
    """Every kind of bad session gets the same answer as no session."""

    async def _answer(self, client: AsyncClient, token: str | None):
        client.cookies.clear()
        if token is not None:
            client.cookies.set("token", token)
        resp = await client.get("/api/v1/items/")
        return resp.status_code, resp.json()

    async def test_all_failures_look_the_same(self, client, catalogs, authenticator) -> None:
        a, _ = catalogs
        expired = authenticator.issue(a, now=datetime.now(timezone.utc) - timedelta(days=1))
        valid = authenticator.issue(a)
        head, payload, sig = valid.split(".")
        tampered = f"{head}.{payload}.{sig[:-2]}{'AA' if sig[-2:] != 'AA' else 'BB'}"

        missing = await self._answer(client, None)
        assert missing == (401, {"detail": "Unauthorized"})
        for token in (expired, tampered, "garbage", ""):
            assert await self._answer(client, token) == missing

        assert (await self._answer(client, valid))[0] == 200

    async def test_non_positive_catalog_id(self, client, authenticator) -> None:
        class Ghost:
            id = 0
            name = "ghost"

        client.cookies.set("token", authenticator.issue(Ghost()))
        resp = await client.get("/api/v1/items/")
        assert resp.status_code == 401
        assert resp.json() == {"detail": "Unauthorized"}

    @pytest.mark.parametrize(
        ("method", "path", "body"),
        [
            ("POST", "/api/v1/items/", {"name": "x", "fingerprint": FP, "tags": []}),
            ("PUT", "/api/v1/items/1", {"tags": []}),
            ("GET", "/api/v1/tags/?q=a", None),
            ("POST", "/api/v1/tags/", {"name": "a"}),
        ],
    )
    async def test_every_endpoint_needs_a_session(self, client, method, path, body) -> None:
        resp = await client.request(method, path, json=body)
        assert resp.status_code == 401


class TestItems:
    async def test_two_catalog_scenario(self, client, session_factory, catalogs) -> None:
        await login(client, PASSWORD_A)
        resp = await client.post("/api/v1/items/", json={"name": "x", "fingerprint": FP, "tags": []})
        assert resp.status_code == 201
        item_id = resp.json()["id"]

        resp = await client.get("/api/v1/items/")
        assert resp.status_code == 200
        [item] = resp.json()
        assert item["id"] == item_id
        assert item["name"] == "x"
        assert item["fingerprint"] == FP
        assert item["photoUrl"] is None
        assert "createdAt" in item
        assert item["tags"] == []

        resp = await client.post("/api/v1/tags/", json={"name": "a-only"})
        tag_of_a = resp.json()["id"]

        await login(client, PASSWORD_B)
        resp = await client.post(
            "/api/v1/items/", json={"name": "steal", "fingerprint": FP, "tags": [tag_of_a]}
        )
        assert resp.status_code == 400
        assert str(tag_of_a) in resp.json()["detail"]
        assert (await client.get("/api/v1/items/")).json() == []
        assert await count_rows(session_factory, Item) == 1

    async def test_camel_case_payload(self, client, catalogs) -> None:
        await login(client, PASSWORD_A)
        tag = (await client.post("/api/v1/tags/", json={"name": "red"})).json()
        resp = await client.post(
            "/api/v1/items/",
            json={"name": "pic", "fingerprint": FP, "photoUrl": "http://img/p.jpg", "tags": [tag["id"]]},
        )
        assert resp.status_code == 201
        [item] = (await client.get("/api/v1/items/")).json()
        assert item["photoUrl"] == "http://img/p.jpg"
        assert item["tags"] == [tag]

    async def test_malformed_fingerprint(self, client, session_factory, catalogs) -> None:
        await login(client, PASSWORD_A)
        resp = await client.post("/api/v1/items/", json={"name": "x", "fingerprint": "xyz", "tags": []})
        assert resp.status_code == 400
        assert "fingerprint" in resp.json()["detail"]
        assert await count_rows(session_factory, Item) == 0

    async def test_replace_tags(self, client, session_factory, catalogs) -> None:
        await login(client, PASSWORD_A)
        red = (await client.post("/api/v1/tags/", json={"name": "red"})).json()
        blue = (await client.post("/api/v1/tags/", json={"name": "blue"})).json()
        item_id = (
            await client.post("/api/v1/items/", json={"name": "x", "fingerprint": FP, "tags": [red["id"]]})
        ).json()["id"]

        resp = await client.put(f"/api/v1/items/{item_id}", json={"tags": [blue["id"]]})
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "tags": [blue]}

        resp = await client.put(f"/api/v1/items/{item_id}", json={"tags": []})
        assert resp.json() == {"status": "ok", "tags": []}
        assert await count_rows(session_factory, items_tags) == 0
        assert await count_rows(session_factory, Item) == 1

    async def test_replace_tags_of_other_catalogs_item(self, client, catalogs) -> None:
        await login(client, PASSWORD_A)
        item_id = (
            await client.post("/api/v1/items/", json={"name": "x", "fingerprint": FP, "tags": []})
        ).json()["id"]

        await login(client, PASSWORD_B)
        resp = await client.put(f"/api/v1/items/{item_id}", json={"tags": []})
        assert resp.status_code == 404

    async def test_non_integer_item_id(self, client, catalogs) -> None:
        await login(client, PASSWORD_A)
        resp = await client.put("/api/v1/items/abc", json={"tags": []})
        assert resp.status_code == 422

    @pytest.mark.parametrize("item_id", ["0", str(1 << 63)])
    async def test_out_of_range_item_id(self, client, catalogs, item_id) -> None:
        await login(client, PASSWORD_A)
        resp = await client.put(f"/api/v1/items/{item_id}", json={"tags": []})
        assert resp.status_code == 422

    @pytest.mark.parametrize("tag_id", [0, 1 << 63])
    async def test_out_of_range_tag_ids(self, client, session_factory, catalogs, tag_id) -> None:
        await login(client, PASSWORD_A)
        resp = await client.post("/api/v1/items/", json={"name": "x", "fingerprint": FP, "tags": [tag_id]})
        assert resp.status_code == 422
        assert await count_rows(session_factory, Item) == 0

        item_id = (
            await client.post("/api/v1/items/", json={"name": "y", "fingerprint": FP, "tags": []})
        ).json()["id"]
        resp = await client.put(f"/api/v1/items/{item_id}", json={"tags": [tag_id]})
        assert resp.status_code == 422


class TestTags:
    async def test_create_is_idempotent(self, client, catalogs) -> None:
        await login(client, PASSWORD_A)
        first = await client.post("/api/v1/tags/", json={"name": "red"})
        second = await client.post("/api/v1/tags/", json={"name": "red"})
        assert first.status_code == second.status_code == 201
        assert first.json() == second.json()

        resp = await client.get("/api/v1/tags/", params={"q": "RE"})
        assert resp.json() == [first.json()]

    async def test_search_requires_query(self, client, catalogs) -> None:
        await login(client, PASSWORD_A)
        assert (await client.get("/api/v1/tags/")).status_code == 400
        assert (await client.get("/api/v1/tags/", params={"q": ""})).status_code == 400

    async def test_blank_tag_name(self, client, catalogs) -> None:
        await login(client, PASSWORD_A)
        assert (await client.post("/api/v1/tags/", json={"name": ""})).status_code == 422
        assert (await client.post("/api/v1/tags/", json={"name": "   "})).status_code == 400


async def test_root(client) -> None:
    resp = await client.get("/")
    assert resp.status_code == 200
    assert "Snapshelf" in resp.json()["message"]
