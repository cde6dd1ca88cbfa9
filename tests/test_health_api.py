# tests/test_health_api.py
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

import teamcal.api.v1.health as health_module


class _FakeRedis:
    fail = False

    @classmethod
    def from_url(cls, url, **kwargs):
        return cls()

    async def ping(self):
        if self.fail:
            raise RedisConnectionError("redis is down")
        return True

    async def aclose(self):
        return None


@pytest.mark.asyncio
async def test_healthz_ok(client, monkeypatch):
    monkeypatch.setattr(health_module, "Redis", _FakeRedis)
    response = await client.get("/healthz")
    assert response.status_code == 200
    assert response.json()["db"] == "ok"
    assert response.json()["cache"] == "ok"


@pytest.mark.asyncio
async def test_healthz_cache_error(client, monkeypatch):
    broken = type("BrokenRedis", (_FakeRedis,), {"fail": True})
    monkeypatch.setattr(health_module, "Redis", broken)
    response = await client.get("/healthz")
    assert response.status_code == 500
    assert response.json() == {"error": "cache error"}
