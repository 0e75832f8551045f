"""Shared test fixtures for backend tests."""

from datetime import datetime
from typing import AsyncGenerator
from zoneinfo import ZoneInfo

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from bookline.api.deps import get_booking_client, get_slot_composer, get_team_directory
from bookline.auth.actor import Delegate, Owner
from bookline.auth.context import RequestContext
from bookline.auth.jwt import create_access_token
from bookline.auth.permissions import Permission
from bookline.auth.roles import Role
from bookline.main import app
from bookline.scheduling.clock import FixedClock
from bookline.scheduling.slots import SlotComposer, SlotPolicy
from bookline.services.booking_client import BookingBackendClient
from bookline.services.team_directory import TeamDirectory

BUSINESS_ID = "client_1"
TZ = ZoneInfo("America/New_York")


def local(*args) -> datetime:
    """Build an aware datetime in the business time zone."""
    return datetime(*args, tzinfo=TZ)


# ── Scheduling ───────────────────────────────────────────────────────────────

@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(local(2025, 3, 10, 14, 0))


@pytest.fixture
def policy() -> SlotPolicy:
    return SlotPolicy(timezone="America/New_York")


@pytest.fixture
def composer(policy: SlotPolicy, clock: FixedClock) -> SlotComposer:
    return SlotComposer(policy, clock)


# ── Actors ───────────────────────────────────────────────────────────────────

@pytest.fixture
def owner() -> Owner:
    return Owner(actor_id="owner_1", business_id=BUSINESS_ID)


@pytest.fixture
def owner_ctx(owner: Owner) -> RequestContext:
    return RequestContext(actor=owner)


@pytest.fixture
def staff() -> Delegate:
    return Delegate(
        actor_id="team_99",
        business_id=BUSINESS_ID,
        role=Role.STAFF,
        permissions=frozenset({Permission.APPOINTMENTS_CREATE}),
    )


@pytest.fixture
def directory() -> TeamDirectory:
    return TeamDirectory()


# ── HTTP ─────────────────────────────────────────────────────────────────────

def make_auth_header(actor) -> dict:
    """Create an Authorization header with a valid JWT for `actor`."""
    return {"Authorization": f"Bearer {create_access_token(actor)}"}


class BookingBackendStub:
    """Records forwarded appointments and answers like the booking backend."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 201
        self.body: dict = {"id": 42, "confirmed": False}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)

    def client(self) -> BookingBackendClient:
        return BookingBackendClient(
            base_url="http://booking.test", transport=httpx.MockTransport(self.handler),
        )


@pytest.fixture
def booking_backend() -> BookingBackendStub:
    return BookingBackendStub()


@pytest.fixture
def override_services(directory: TeamDirectory, composer: SlotComposer,
                      booking_backend: BookingBackendStub):
    app.dependency_overrides[get_team_directory] = lambda: directory
    app.dependency_overrides[get_slot_composer] = lambda: composer
    app.dependency_overrides[get_booking_client] = booking_backend.client
    yield
    app.dependency_overrides.clear()


async def _client(headers: dict | None = None) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", headers=headers or {}) as client:
        yield client


@pytest_asyncio.fixture
async def owner_client(override_services, owner: Owner) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client authenticated as the business owner."""
    async for client in _client(make_auth_header(owner)):
        yield client


@pytest_asyncio.fixture
async def staff_client(override_services, staff: Delegate) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client authenticated as a staff member holding only appointments.create."""
    async for client in _client(make_auth_header(staff)):
        yield client


@pytest_asyncio.fixture
async def anon_client(override_services) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client with no authentication."""
    async for client in _client():
        yield client
