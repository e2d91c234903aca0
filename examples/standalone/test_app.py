"""Tests for the standalone example."""

from stackpeek.testing import TestClient, assert_masked, assert_page


class TestStandaloneApp:
    async def test_index(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/")
            assert_page(response)
            assert "Standalone stack" in response.text

    async def test_extra_pattern_masked(self, example_app, monkeypatch) -> None:
        monkeypatch.setenv("INTERNAL_ENDPOINT", "http://10.0.0.5")
        async with TestClient(example_app) as client:
            response = await client.get("/")
            assert_masked(response, "INTERNAL_ENDPOINT", "http://10.0.0.5")
            assert "10.0.0.5" not in response.text

    async def test_only_get(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.post("/")
            assert response.status == 405
