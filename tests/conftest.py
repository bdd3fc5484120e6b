import os
import random

import pytest
import pytest_asyncio

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from ride_dispatch.engine import DispatchClock, DispatchEngine, RideFactory

from .helpers import ManualSleep, settle


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def manual_sleep():
    return ManualSleep()


@pytest.fixture
def factory(rng):
    return RideFactory(rng=rng)


@pytest_asyncio.fixture
async def engine(rng, manual_sleep):
    engine = DispatchEngine(
        factory=RideFactory(rng=rng),
        clock=DispatchClock(rng=rng, sleep=manual_sleep),
        driver_id="driver-1",
    )
    yield engine
    engine.shutdown()
    await settle()


@pytest.fixture
def client():
    from fastapi.testclient import TestClient

    from ride_dispatch.engine.sessions import sessions
    from ride_dispatch.main import app

    with TestClient(app) as test_client:
        yield test_client
    sessions.shutdown_all()


@pytest.fixture
def driver_token():
    from ride_dispatch.utils.jwt_utils import create_access_token

    return create_access_token({"user_id": "driver-7", "role": "driver", "name": "Sam"})


@pytest.fixture
def driver_headers(driver_token):
    return {"Authorization": f"Bearer {driver_token}"}
