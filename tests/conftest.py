"""Shared fixtures: fake clocks, a fake HTTP session, synchronous workers."""

from __future__ import annotations

import pytest
import requests

from session_core import http_client
from session_core.config import LoggerSetup, ModeConfig
from session_core.delivery import DeliveryPipeline
from session_core.loop import MainLoop
from session_core.session import SessionAggregator

from fakes import ACTIONS, COLLECTOR_URL, DeferredSpawner, FakeClock, FakeHttp, FakeWallClock, sync_spawn


@pytest.fixture
def fake_http(monkeypatch: pytest.MonkeyPatch) -> FakeHttp:
    fake = FakeHttp()
    monkeypatch.setattr(http_client, "http", fake)
    return fake


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def wall_clock() -> FakeWallClock:
    return FakeWallClock()


@pytest.fixture
def make_setup(tmp_path):
    def factory(save: bool = True, send: bool = True, **overrides) -> LoggerSetup:
        values = dict(
            build_config=ModeConfig(save_local_json=save, send_to_server=send),
            server_url=COLLECTOR_URL,
            action_names=ACTIONS,
            storage_dir=str(tmp_path / "store"),
            app_name="TestGame",
            app_version="2.3.1",
        )
        values.update(overrides)
        return LoggerSetup(**values)

    return factory


@pytest.fixture
def make_aggregator(clock, wall_clock):
    def factory(setup: LoggerSetup) -> SessionAggregator:
        aggregator = SessionAggregator(now=wall_clock, monotonic=clock)
        aggregator.initialize(setup)
        return aggregator

    return factory


@pytest.fixture
def loop(clock) -> MainLoop:
    return MainLoop(clock=clock)


@pytest.fixture
def make_pipeline(make_aggregator, loop):
    def factory(setup: LoggerSetup, spawn=sync_spawn) -> DeliveryPipeline:
        return DeliveryPipeline(make_aggregator(setup), loop, spawn=spawn)

    return factory


@pytest.fixture
def connection_error() -> requests.ConnectionError:
    return requests.ConnectionError("collector unreachable")


@pytest.fixture
def deferred() -> DeferredSpawner:
    return DeferredSpawner()
