import json
import uuid
from typing import Optional

import httpx
import pytest
import pytest_asyncio

from storefront.app import Storefront
from storefront.core.config import Settings
from storefront.core.session import Browser
from storefront.core.storage import DurableStore

API_URL = "http://api.test/api"

PRODUCTS = {
    "P1": {"name": "Ocean Drift", "category": "sneakers", "price": 129.99, "color": "blue",
           "colors": ["blue", "white"], "sizes": ["7", "8", "9"]},
    "P2": {"name": "Forest Trail", "category": "boots", "price": 189.00, "color": "brown",
           "colors": ["brown"], "sizes": ["8", "9"]},
    "P3": {"name": "Meadow Flat", "category": "flats", "price": 89.50, "color": "green",
           "colors": ["green", "black"], "sizes": ["6", "7"]},
}


class FakeStorefrontAPI:
    """
    In-memory stand-in for the storefront REST API.

    Collections are keyed by owner: "user:<id>" for bearer tokens and
    "guest:<uuid>" for guests. Logging in merges the guest's collections
    into the account. Every request is recorded in `requests`.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.users: dict[str, dict] = {}
        self.tokens: dict[str, str] = {}
        self.carts: dict[str, list[dict]] = {}
        self.wishlists: dict[str, list[str]] = {}
        self.orders: dict[str, list[dict]] = {}
        self.addresses: dict[str, list[dict]] = {}
        self.failures: dict[tuple[str, str], tuple[int, dict]] = {}
        self.out_of_stock: set[tuple[str, Optional[str], str]] = set()
        self.add_user("u1", "shopper@example.com", "Secret1!", "Sam Shopper")

    # ---------- test helpers ----------

    def add_user(self, user_id: str, email: str, password: str, name: str) -> None:
        self.users[email] = {"id": user_id, "email": email, "password": password, "full_name": name}

    def fail_next(self, method: str, path: str, status: int = 500, body: Optional[dict] = None) -> None:
        self.failures[(method, path)] = (status, {"error": "Internal error"} if body is None else body)

    def calls(self, method: Optional[str] = None, path: Optional[str] = None) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if (method is None or r.method == method)
            and (path is None or r.url.path == "/api" + path)
        ]

    def call_log(self) -> list[str]:
        return [f"{r.method} {r.url.path[len('/api'):]}" for r in self.requests]

    def seed_cart(self, owner: str, product_ids: list[str]) -> None:
        for pid in product_ids:
            self._add_line(owner, pid, PRODUCTS[pid]["color"], PRODUCTS[pid]["sizes"][0], 1)

    # ---------- plumbing ----------

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path[len("/api"):]

        failure = self.failures.pop((request.method, path), None)
        if failure:
            return httpx.Response(failure[0], json=failure[1])

        body = json.loads(request.content) if request.content else {}
        owner = self._owner(request)
        if owner is None and not path.startswith("/auth/"):
            return httpx.Response(401, json={"error": "Invalid or expired token"})

        parts = path.strip("/").split("/")
        try:
            return self._route(request.method, parts, body, owner, request)
        except (KeyError, ValueError):
            return httpx.Response(404, json={"error": "Not found"})

    def _owner(self, request: httpx.Request) -> Optional[str]:
        auth = request.headers.get("Authorization")
        if auth:
            user_id = self.tokens.get(auth.removeprefix("Bearer "))
            return f"user:{user_id}" if user_id else None
        guest_id = request.headers.get("x-guest-id")
        return f"guest:{guest_id}" if guest_id else None

    def _route(self, method, parts, body, owner, request) -> httpx.Response:
        head = parts[0]
        if head == "auth":
            return self._auth(parts[1], body, request)
        if head == "cart":
            return self._cart(method, parts[1:], body, owner)
        if head == "wishlist":
            return self._wishlist(method, parts[1:], body, owner)
        if head == "addresses":
            return self._addresses(method, parts[1:], body, owner)
        if head == "checkout":
            return self._checkout(parts[1], body, owner)
        if head == "orders":
            return self._orders(method, parts[1:], owner)
        return httpx.Response(404, json={"error": "Not found"})

    # ---------- auth ----------

    def _auth(self, action, body, request) -> httpx.Response:
        if action == "check-email":
            return httpx.Response(200, json={"exists": body.get("email") in self.users})
        if action == "register":
            if body["email"] in self.users:
                return httpx.Response(409, json={"error": "Email already exists"})
            self.add_user(f"u{len(self.users) + 1}", body["email"], body["password"], body["name"])
        user = self.users.get(body.get("email"))
        if not user or user["password"] != body.get("password"):
            return httpx.Response(401, json={"error": "Invalid credentials"})

        token = uuid.uuid4().hex
        self.tokens[token] = user["id"]
        guest_id = request.headers.get("x-guest-id")
        if guest_id:
            self._merge(f"guest:{guest_id}", f"user:{user['id']}")
        profile = {k: v for k, v in user.items() if k != "password"}
        return httpx.Response(200, json={"token": token, "user": profile})

    def _merge(self, guest: str, user: str) -> None:
        for line in self.carts.pop(guest, []):
            self._add_line(user, line["product_id"], line["color"], line["size"], line["quantity"])
        saved = self.wishlists.setdefault(user, [])
        for pid in self.wishlists.pop(guest, []):
            if pid not in saved:
                saved.append(pid)

    # ---------- cart ----------

    def _add_line(self, owner, pid, color, size, quantity) -> None:
        lines = self.carts.setdefault(owner, [])
        for line in lines:
            if (line["product_id"], line["color"], line["size"]) == (pid, color, size):
                line["quantity"] += quantity
                return
        lines.append({"cart_item_id": uuid.uuid4().hex[:8], "product_id": pid,
                      "color": color, "size": size, "quantity": quantity})

    def _cart_body(self, owner) -> dict:
        items = []
        for line in self.carts.get(owner, []):
            product = PRODUCTS[line["product_id"]]
            items.append({
                **line,
                "name": product["name"],
                "category": product["category"],
                "selling_price": f"{product['price']:.2f}",
                "effective_price": f"{product['price']:.2f}",
                "line_total": f"{product['price'] * line['quantity']:.2f}",
                "available_colors": product["colors"],
                "available_sizes": product["sizes"],
            })
        subtotal = sum(float(i["line_total"]) for i in items)
        tax = round(subtotal * 0.06, 2)
        summary = {"subtotal": f"{subtotal:.2f}", "tax": f"{tax:.2f}",
                   "shipping": "11.95", "total": f"{subtotal + tax + 11.95:.2f}"}
        return {"items": items, "summary": summary if items else None}

    def _find_line(self, owner, item_id) -> dict:
        for line in self.carts.get(owner, []):
            if line["cart_item_id"] == item_id:
                return line
        raise KeyError(item_id)

    def _cart(self, method, parts, body, owner) -> httpx.Response:
        if method == "GET" and not parts:
            return httpx.Response(200, json=self._cart_body(owner))
        if method == "POST" and parts == ["add"]:
            pid = body["productId"]
            if (pid, body.get("color"), body["size"]) in self.out_of_stock:
                return httpx.Response(400, json={"error": "Out of stock"})
            self._add_line(owner, pid, body.get("color"), body["size"], body.get("quantity", 1))
            return httpx.Response(201, json={"message": "Added"})
        if method == "POST" and parts[0] == "move-to-wishlist":
            line = self._find_line(owner, parts[1])
            self.carts[owner].remove(line)
            saved = self.wishlists.setdefault(owner, [])
            if line["product_id"] not in saved:
                saved.append(line["product_id"])
            return httpx.Response(200, json={"message": "Moved"})

        line = self._find_line(owner, parts[0])
        if method == "DELETE":
            self.carts[owner].remove(line)
        elif parts[1] == "increase":
            line["quantity"] += 1
        elif parts[1] == "decrease":
            line["quantity"] -= 1
            if line["quantity"] == 0:
                self.carts[owner].remove(line)
        elif parts[1] == "change-variant":
            if (line["product_id"], body.get("color"), body.get("size")) in self.out_of_stock:
                return httpx.Response(400, json={"error": "Selected variant is out of stock"})
            line["color"], line["size"] = body.get("color"), body.get("size")
        return httpx.Response(200, json={"message": "Updated"})

    # ---------- wishlist ----------

    def _wishlist_body(self, owner) -> dict:
        items = []
        for pid in self.wishlists.get(owner, []):
            product = PRODUCTS[pid]
            items.append({
                "wishlist_item_id": f"w-{pid}",
                "product_id": pid,
                "name": product["name"],
                "category": product["category"],
                "selling_price": f"{product['price']:.2f}",
                "sale_price": None,
                "on_sale": False,
                "color": product["color"],
                "available_sizes": product["sizes"],
                "available_colors": product["colors"],
            })
        return {"items": items}

    def _wishlist(self, method, parts, body, owner) -> httpx.Response:
        saved = self.wishlists.setdefault(owner, [])
        if method == "GET":
            return httpx.Response(200, json=self._wishlist_body(owner))
        if method == "POST" and parts == ["add"]:
            if body["product_id"] not in saved:
                saved.append(body["product_id"])
            return httpx.Response(201, json={"message": "Saved"})
        if method == "DELETE":
            saved.remove(parts[0])
            return httpx.Response(200, json={"message": "Removed"})
        if method == "POST" and parts[0] == "move-to-cart":
            pid = parts[1]
            saved.remove(pid)
            self._add_line(owner, pid, body.get("color"), body["size"], 1)
            return httpx.Response(200, json={"message": "Moved"})
        return httpx.Response(404, json={"error": "Not found"})

    # ---------- addresses / checkout / orders ----------

    def _addresses(self, method, parts, body, owner) -> httpx.Response:
        book = self.addresses.setdefault(owner, [])
        if method == "GET":
            return httpx.Response(200, json={"addresses": book})
        if method == "POST":
            address = {**body, "id": f"a{len(book) + 1}"}
            book.append(address)
            return httpx.Response(201, json={"address": address})
        return httpx.Response(404, json={"error": "Not found"})

    def _checkout(self, kind, body, owner) -> httpx.Response:
        cart = self._cart_body(owner)
        if not cart["items"]:
            return httpx.Response(400, json={"error": "Cart is empty"})
        order = {
            "id": f"o{sum(len(o) for o in self.orders.values()) + 1}",
            "order_number": "GS-1001",
            "status": "confirmed",
            "total": cart["summary"]["total"],
            "items": [{"product_id": i["product_id"], "name": i["name"], "quantity": i["quantity"]}
                      for i in cart["items"]],
            "payload": body,
        }
        self.orders.setdefault(owner, []).append(order)
        self.carts[owner] = []
        key = "order_summary" if kind == "guest" else "order"
        return httpx.Response(201, json={key: order})

    def _orders(self, method, parts, owner) -> httpx.Response:
        orders = self.orders.get(owner, [])
        if method == "GET" and not parts:
            return httpx.Response(200, json={"orders": orders})
        order = next((o for o in orders if o["id"] == parts[0]), None)
        if order is None:
            return httpx.Response(404, json={"error": "Order not found"})
        if method == "GET":
            return httpx.Response(200, json={"order": order})
        for item in order["items"]:
            product = PRODUCTS[item["product_id"]]
            self._add_line(owner, item["product_id"], product["color"], product["sizes"][0], item["quantity"])
        return httpx.Response(200, json={"message": "Items added to cart"})


@pytest.fixture
def fake_api() -> FakeStorefrontAPI:
    return FakeStorefrontAPI()


@pytest.fixture
def transport(fake_api) -> httpx.MockTransport:
    return httpx.MockTransport(fake_api.handler)


@pytest.fixture
def config() -> Settings:
    return Settings(api_base_url=API_URL, storage_path=None)


@pytest.fixture
def browser(config) -> Browser:
    return Browser(durable=DurableStore(), config=config)


@pytest_asyncio.fixture
async def storefront(browser, transport):
    store = Storefront(browser.open_tab(), transport=transport)
    await store.open()
    yield store
    await store.close()


@pytest_asyncio.fixture
async def second_tab(browser, transport):
    store = Storefront(browser.open_tab(), transport=transport)
    await store.open()
    yield store
    await store.close()
