import asyncio
import json
from collections import Counter
from typing import Any, Dict

import anyio
import httpx

DATABASE_URL = "https://inventory-test.firebaseio.example"
API_KEY = "test-api-key"


class FakeFirebase:
    """In-memory realtime database tree plus the password sign-in endpoint."""

    def __init__(self, users: Dict[str, str] = None):
        self.tree: Dict[str, Dict[str, Any]] = {}
        self.users = users if users is not None else {"owner@example.com": "secret123"}
        self.fail_reads = False
        self.fail_writes = False
        self.sign_in_error = None
        self.requests = []
        # collection -> initial snapshots consumed by a subscriber
        self.delivered = Counter()

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport(), timeout=5.0)

    def seed(self, collection: str, records: Dict[str, Dict[str, Any]]) -> None:
        self.tree[collection] = {str(k): dict(v) for k, v in records.items()}

    def ids(self, collection: str):
        return sorted(int(k) for k in self.tree.get(collection, {}))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append((request.method, request.url.path))
        if request.url.path.endswith("accounts:signInWithPassword"):
            return self._sign_in(request)

        if request.url.params.get("auth") is None:
            return httpx.Response(401, json={"error": "Permission denied"})

        path = request.url.path.strip("/")
        if not path.endswith(".json"):
            return httpx.Response(404, json={"error": "Not found"})
        parts = path[: -len(".json")].split("/")
        collection = parts[0]
        record_id = parts[1] if len(parts) > 1 else None

        if request.method == "GET":
            if self.fail_reads:
                return httpx.Response(500, json={"error": "Internal error"})
            if request.headers.get("accept") == "text/event-stream":
                return httpx.Response(
                    200,
                    headers={"content-type": "text/event-stream"},
                    content=self._stream(collection),
                )
            return httpx.Response(
                200,
                headers={"content-type": "application/json"},
                content=json.dumps(self._read(collection, record_id)).encode(),
            )

        if self.fail_writes:
            return httpx.Response(401, json={"error": "Permission denied"})
        if request.method == "PUT":
            value = json.loads(request.content)
            self.tree.setdefault(collection, {})[record_id] = value
            return httpx.Response(200, json=value)
        if request.method == "DELETE":
            self.tree.get(collection, {}).pop(record_id, None)
            return httpx.Response(200, json=None)
        return httpx.Response(405, json={"error": "Method not allowed"})

    def _read(self, collection: str, record_id):
        records = self.tree.get(collection) or None
        if records is None or record_id is None:
            return records
        return records.get(record_id)

    async def _stream(self, collection: str):
        payload = {"path": "/", "data": self._read(collection, None)}
        yield f"event: put\ndata: {json.dumps(payload)}\n\n".encode()
        self.delivered[collection] += 1
        yield b": keep-alive\n\n"
        # the real stream stays open until the client goes away
        await asyncio.Event().wait()

    def _sign_in(self, request: httpx.Request) -> httpx.Response:
        if request.url.params.get("key") != API_KEY:
            return httpx.Response(400, json={"error": {"message": "API key not valid"}})
        if self.sign_in_error is not None:
            return httpx.Response(400, json={"error": {"message": self.sign_in_error}})
        body = json.loads(request.content)
        email = body.get("email", "")
        if "@" not in email:
            return httpx.Response(400, json={"error": {"message": "INVALID_EMAIL"}})
        if self.users.get(email) != body.get("password"):
            return httpx.Response(400, json={"error": {"message": "INVALID_LOGIN_CREDENTIALS"}})
        return httpx.Response(
            200,
            json={
                "localId": f"uid-{email.split('@')[0]}",
                "email": email,
                "idToken": "id-token-1",
                "refreshToken": "refresh-token-1",
            },
        )


async def wait_until(predicate, timeout: float = 3.0) -> None:
    with anyio.fail_after(timeout):
        while not predicate():
            await anyio.sleep(0.01)
