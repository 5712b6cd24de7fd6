"""API test fixtures — FastAPI test client bound to a tmp_path vault.

Invariants:
    - get_vault dependency overridden to a controller over a fresh store
    - The controller clock is fixed so statuses are deterministic

Design Decisions:
    - Lifespan is not run by ASGITransport: the controller is started here instead
    - Small attachment cap (1 KiB) so the 413 path needs no large payloads
"""

from datetime import datetime, timezone

import pytest
from httpx import ASGITransport, AsyncClient

from certvault.infrastructure.attachment_encoder import AttachmentEncoder
from certvault.main import app
from certvault.services.vault_controller import VaultController, get_vault

from tests.fakes import FailingStore

NOW = datetime(2024, 12, 15, tzinfo=timezone.utc)


@pytest.fixture
async def failing_store(store):
    return FailingStore(inner=store)


@pytest.fixture
async def vault(failing_store):
    controller = VaultController(
        failing_store, AttachmentEncoder(max_bytes=1024), clock=lambda: NOW,
    )
    await controller.start()
    return controller


@pytest.fixture
async def client(vault):
    """FastAPI test client with the vault dependency overridden."""
    app.dependency_overrides[get_vault] = lambda: vault
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
    app.dependency_overrides.clear()
