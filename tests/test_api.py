"""Tests for the FastAPI endpoints."""

import pytest
from httpx import ASGITransport, AsyncClient

from conftest import BASE, ETHEREUM, TEST_PRIVATE_KEY, WALLET
from swapsettle.api.app import create_app
from swapsettle.config import Settings
from swapsettle.signing.local import LocalSigner
from swapsettle.swap_engine import create_engine


def swap_body(**overrides) -> dict:
    body = {
        "source_token": "USDC",
        "dest_token": "ETH",
        "source_chain_id": ETHEREUM,
        "dest_chain_id": ETHEREUM,
        "amount": "100000000",
        "wallet_address": WALLET,
    }
    body.update(overrides)
    return body


CROSS_CHAIN = {"dest_token": "USDC", "dest_chain_id": BASE, "amount": "500000000"}


@pytest.fixture
async def test_app():
    """Create test application with a dry-run engine.

    ASGITransport does not run the lifespan, so the engine is attached here.
    """
    settings = Settings(
        dry_run=True,
        enabled_chain_ids="1,8453",
        watcher_poll_interval=5.0,
        request_timeout=1.0,
    )
    engine = create_engine(settings, signer=LocalSigner(TEST_PRIVATE_KEY))
    app = create_app(engine)
    app.state.engine = engine

    yield app

    # Cleanup
    await engine.shutdown()


@pytest.fixture
async def client(test_app):
    """Create async test client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    @pytest.mark.asyncio
    async def test_health_check(self, client):
        """Test basic health check."""
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "swapsettle"
        assert data["chains"] == [ETHEREUM, BASE]

    @pytest.mark.asyncio
    async def test_detailed_health(self, client):
        """Detailed health lists venue wiring, signer and watcher settings."""
        response = await client.get("/health/detailed")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["dry_run"] is True
        assert data["signer"] == WALLET
        assert data["venues"]["same_chain"] == {"1": "fusion_sim (1)", "8453": "fusion_sim (8453)"}
        assert data["venues"]["raw_swap"]["8453"] == "swap_sim (8453)"
        assert data["venues"]["cross_chain"] == "fusion_plus_sim"
        assert data["watchers"] == {"active": 0, "poll_interval": 5.0, "max_iterations": 120}
        assert data["config"]["oneinch"]["api_key"] == "(not set)"

    @pytest.mark.asyncio
    async def test_detailed_health_counts_watchers(self, client):
        await client.post("/api/v1/orders", json=swap_body(**CROSS_CHAIN))

        response = await client.get("/health/detailed")

        assert response.json()["watchers"]["active"] == 1

    @pytest.mark.asyncio
    async def test_health_before_startup(self):
        transport = ASGITransport(app=create_app())
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            response = await ac.get("/health/detailed")

        assert response.status_code == 200
        assert response.json()["status"] == "starting"


class TestQuoteEndpoints:
    """Tests for quote endpoints."""

    @pytest.mark.asyncio
    async def test_same_chain_quote(self, client):
        response = await client.post("/api/v1/quotes", json=swap_body())

        assert response.status_code == 200
        data = response.json()
        assert data["route"] == "same_chain"
        assert data["venue"] == "fusion_sim (1)"
        assert data["source_amount"] == "100000000"
        assert int(data["dest_amount"]) > 0
        assert data["secrets_count"] is None

    @pytest.mark.asyncio
    async def test_cross_chain_quote(self, client):
        """Cross-chain quotes carry the number of secrets the order needs."""
        response = await client.post("/api/v1/quotes", json=swap_body(**CROSS_CHAIN))

        assert response.status_code == 200
        data = response.json()
        assert data["route"] == "cross_chain"
        assert data["secrets_count"] == 4

    @pytest.mark.asyncio
    async def test_zero_amount(self, client):
        """Zero amounts are rejected before any venue is asked."""
        response = await client.post("/api/v1/quotes", json=swap_body(amount="0"))

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert data["code"] == "AmountTooSmall"
        assert "larger amount" in data["error"]

    @pytest.mark.asyncio
    async def test_unsupported_chain(self, client):
        response = await client.post("/api/v1/quotes", json=swap_body(dest_chain_id=999))

        assert response.status_code == 400
        assert response.json()["code"] == "RouteUnavailable"

    @pytest.mark.asyncio
    async def test_unknown_token(self, client):
        response = await client.post("/api/v1/quotes", json=swap_body(dest_token="NOPE"))

        assert response.status_code == 400
        assert response.json()["code"] == "TokenUnsupported"

    @pytest.mark.asyncio
    async def test_invalid_wallet(self, client):
        response = await client.post("/api/v1/quotes", json=swap_body(wallet_address="0x123"))

        assert response.status_code == 400
        assert response.json()["code"] == "InvalidRequest"

    @pytest.mark.asyncio
    async def test_invalid_slippage(self, client):
        """Test slippage outside the allowed range."""
        response = await client.post("/api/v1/quotes", json=swap_body(slippage="0"))

        # FastAPI returns 422 for validation errors
        assert response.status_code == 422


class TestOrderEndpoints:
    """Tests for order endpoints."""

    @pytest.mark.asyncio
    async def test_place_same_chain_order(self, client):
        response = await client.post("/api/v1/orders", json=swap_body())

        assert response.status_code == 201
        data = response.json()
        assert data["route"] == "same_chain"
        assert data["status"] == "submitted"
        assert data["watching"] is False
        assert data["hash_lock"] is None

    @pytest.mark.asyncio
    async def test_place_cross_chain_order(self, client):
        """Cross-chain orders return submitted with a watcher running."""
        response = await client.post("/api/v1/orders", json=swap_body(**CROSS_CHAIN))

        assert response.status_code == 201
        data = response.json()
        assert data["route"] == "cross_chain"
        assert data["status"] == "submitted"
        assert data["watching"] is True
        assert data["hash_lock"].startswith("0x")
        assert len(data["secret_hashes"]) == 4
        assert data["quote"]["secrets_count"] == 4

    @pytest.mark.asyncio
    async def test_get_order(self, client):
        """Test getting an order placed by this engine."""
        created = await client.post("/api/v1/orders", json=swap_body(**CROSS_CHAIN))
        order_hash = created.json()["order_hash"]

        response = await client.get(f"/api/v1/orders/{order_hash}")

        assert response.status_code == 200
        data = response.json()
        assert data["order_hash"] == order_hash
        assert data["wallet_address"] == WALLET

    @pytest.mark.asyncio
    async def test_get_unknown_order(self, client):
        """Orders unknown to the engine and the venue are rejected."""
        response = await client.get("/api/v1/orders/0x" + "99" * 32)

        assert response.status_code == 400
        data = response.json()
        assert data["code"] == "InvalidRequest"
        assert data["error"] == "Order not found."

    @pytest.mark.asyncio
    async def test_place_order_for_foreign_wallet(self, client):
        response = await client.post(
            "/api/v1/orders",
            json=swap_body(wallet_address="0x1111111111111111111111111111111111111111"),
        )

        assert response.status_code == 400
        assert response.json()["code"] == "InvalidRequest"

    @pytest.mark.asyncio
    async def test_active_orders(self, client):
        created = await client.post("/api/v1/orders", json=swap_body(**CROSS_CHAIN))
        order_hash = created.json()["order_hash"]

        response = await client.get("/api/v1/orders", params={"wallet": WALLET})

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["orders"][0]["orderHash"] == order_hash

    @pytest.mark.asyncio
    async def test_active_orders_invalid_wallet(self, client):
        response = await client.get("/api/v1/orders", params={"wallet": "nope"})

        assert response.status_code == 400


class TestEngineNotStarted:
    @pytest.mark.asyncio
    async def test_service_unavailable(self):
        """Requests before startup get 503."""
        transport = ASGITransport(app=create_app())
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            response = await ac.post("/api/v1/quotes", json=swap_body())

        assert response.status_code == 503
