"""Tests for stackpeek.dashboard: gate, mounted pages, standalone app."""

import sys

import pytest

from stackpeek.app import App
from stackpeek.config import AppConfig, InspectorConfig
from stackpeek.dashboard import build_stack_page, create_app, is_exposed, mount_inspector
from stackpeek.testing import TestClient, assert_hidden, assert_masked, assert_page


def _host_app(**config) -> App:
    app = App(AppConfig(**config))

    @app.route("/users/{id:int}", name="users.show")
    def show_user(id: int):
        return f"user {id}"

    @app.route("/about")
    def about():
        return "about"

    @app.route("/", name="home")
    def index():
        return "home"

    mount_inspector(app)
    return app


class TestGate:
    @pytest.mark.parametrize("env", ["local", "development", "dev", "LOCAL", " dev "])
    def test_local_environments(self, env: str) -> None:
        assert is_exposed(AppConfig(env=env), InspectorConfig())

    def test_debug_overrides_env(self) -> None:
        assert is_exposed(AppConfig(env="production", debug=True), InspectorConfig())

    @pytest.mark.parametrize("env", ["production", "staging", "prod", ""])
    def test_hidden(self, env: str) -> None:
        assert not is_exposed(AppConfig(env=env), InspectorConfig())

    def test_custom_environments(self) -> None:
        config = InspectorConfig(local_environments=("qa",))
        assert is_exposed(AppConfig(env="qa"), config)
        assert not is_exposed(AppConfig(env="local"), config)


class TestMountedGate:
    async def test_production_is_bare_404(self) -> None:
        async with TestClient(_host_app(env="production")) as client:
            assert_hidden(await client.get("/_stackpeek"))
            assert_hidden(await client.get("/_stackpeek/stack"))

    @pytest.mark.parametrize("method", ["POST", "PUT", "DELETE"])
    async def test_production_hides_every_method(self, method: str) -> None:
        async with TestClient(_host_app(env="production")) as client:
            for path in ("/_stackpeek", "/_stackpeek/stack/"):
                response = await client.request(method, path)
                assert_hidden(response)
                assert all(name != "allow" for name, _ in response.headers)

    async def test_local_wrong_method_is_405(self) -> None:
        async with TestClient(_host_app(env="local")) as client:
            response = await client.post("/_stackpeek")
        assert response.status == 405

    async def test_other_routes_unaffected(self) -> None:
        async with TestClient(_host_app(env="production")) as client:
            response = await client.get("/about")
            assert response.status == 200
            assert response.text == "about"

    async def test_local_serves_page(self) -> None:
        async with TestClient(_host_app(env="local")) as client:
            assert_page(await client.get("/_stackpeek"))

    async def test_debug_serves_page(self) -> None:
        async with TestClient(_host_app(env="production", debug=True)) as client:
            assert_page(await client.get("/_stackpeek"))


class TestFrameworkPage:
    async def test_routes_sorted_by_path(self) -> None:
        async with TestClient(_host_app(env="local")) as client:
            text = (await client.get("/_stackpeek")).text
        positions = [
            text.index("<td><code>/</code></td>"),
            text.index("<td><code>/_stackpeek</code></td>"),
            text.index("<td><code>/_stackpeek/stack</code></td>"),
            text.index("<td><code>/about</code></td>"),
            text.index("<td><code>/users/{id:int}</code></td>"),
        ]
        assert positions == sorted(positions)

    async def test_route_count_and_filter(self) -> None:
        async with TestClient(_host_app(env="local")) as client:
            text = (await client.get("/_stackpeek")).text
        assert '<strong id="count">5</strong>' in text
        assert 'id="search"' in text
        assert "<script>" in text

    async def test_gate_listed_as_app_middleware(self) -> None:
        async with TestClient(_host_app(env="local")) as client:
            text = (await client.get("/_stackpeek")).text
        assert "LocalOnly" in text
        assert "users.show" in text

    async def test_cards(self) -> None:
        async with TestClient(_host_app(env="local", cache_driver="memory")) as client:
            text = (await client.get("/_stackpeek")).text
        assert "Application" in text
        assert "Database" in text
        assert "not configured" in text
        assert "● OK" in text
        assert "Installed packages" in text

    async def test_database_connected(self, tmp_path) -> None:
        app = App(AppConfig(env="local"), db=f"sqlite:///{tmp_path / 'app.db'}")
        mount_inspector(app)
        async with TestClient(app) as client:
            text = (await client.get("/_stackpeek")).text
        assert "● Connected" in text
        assert "<code>sqlite</code>" in text

    async def test_heading_shows_project_path(self, tmp_path, monkeypatch) -> None:
        project = tmp_path / "shop"
        project.mkdir()
        monkeypatch.setenv("HOME", str(tmp_path))
        monkeypatch.chdir(project)
        async with TestClient(_host_app(env="local")) as client:
            text = (await client.get("/_stackpeek")).text
        assert '<small class="muted">~/shop</small></h1>' in text

    async def test_custom_path(self) -> None:
        app = App(AppConfig(env="local"))
        mount_inspector(app, path="/debug/")
        async with TestClient(app) as client:
            assert_page(await client.get("/debug"))
            assert_page(await client.get("/debug/stack"))

    async def test_values_escaped(self) -> None:
        app = App(AppConfig(env="local", name="<script>alert(1)</script>"))
        mount_inspector(app)
        async with TestClient(app) as client:
            text = (await client.get("/_stackpeek")).text
        assert "<script>alert(1)</script>" not in text
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in text


class TestStackPage:
    async def test_secret_masked(self, monkeypatch) -> None:
        monkeypatch.setenv("DB_PASSWORD", "xyz-super-secret")
        async with TestClient(create_app()) as client:
            response = await client.get("/")
        assert_page(response)
        assert_masked(response, "DB_PASSWORD", "xyz-super-secret")

    async def test_request_headers_masked(self) -> None:
        async with TestClient(create_app()) as client:
            response = await client.get("/", headers={"Authorization": "Bearer abc-123-def"})
        assert_masked(response, "HTTP_AUTHORIZATION", "Bearer abc-123-def")

    async def test_server_variables_listed(self) -> None:
        async with TestClient(create_app()) as client:
            text = (await client.get("/?x=1")).text
        assert '<td class="key">REQUEST_METHOD</td><td class="val">GET</td>' in text
        assert '<td class="key">QUERY_STRING</td><td class="val">x=1</td>' in text

    async def test_cap_hint(self) -> None:
        inspector = InspectorConfig(env_limit=3)
        async with TestClient(create_app(inspector)) as client:
            text = (await client.get("/")).text
        assert "more variables not shown (limit 3)" in text

    async def test_sections(self) -> None:
        async with TestClient(create_app()) as client:
            text = (await client.get("/")).text
        for title in (
            "Runtime &amp; limits",
            "Loaded modules",
            "Bytecode cache",
            "Container / OS",
            "Configuration files",
            "Environment snapshot",
        ):
            assert title in text
        assert "max_content_length" in text

    async def test_standalone_is_not_gated(self) -> None:
        app = create_app(app_config=AppConfig(env="production"))
        async with TestClient(app) as client:
            assert_page(await client.get("/"))

    def test_build_without_request(self) -> None:
        page = build_stack_page(AppConfig(), InspectorConfig(title="Snapshot"))
        assert page.startswith("<!DOCTYPE html>")
        assert "<title>Snapshot</title>" in page

    def test_document_root_is_static_dir(self, tmp_path, monkeypatch) -> None:
        monkeypatch.setenv("HOME", "/nonexistent-home")
        page = build_stack_page(AppConfig(static_dir=tmp_path / "public"), InspectorConfig())
        assert f"<code>{tmp_path / 'public'}</code>" in page

    async def test_document_root_falls_back_to_root_path(self) -> None:
        app = create_app(app_config=AppConfig(static_dir=None))
        async with TestClient(app) as client:
            text = (await client.get("/")).text
        assert "<div>Document root</div><div><code>—</code></div>" in text

    def test_user_and_git_chips(self, monkeypatch) -> None:
        monkeypatch.setattr("getpass.getuser", lambda: "deploy")
        inspector = InspectorConfig(
            git_branch_command=(sys.executable, "-c", "print('main')"),
            git_commit_command=(sys.executable, "-c", "print('abc1234')"),
        )
        page = build_stack_page(AppConfig(), inspector)
        assert '<span class="chip">User: deploy</span>' in page
        assert '<span class="chip">Git: main@abc1234</span>' in page

    def test_git_chip_omitted_outside_repository(self) -> None:
        inspector = InspectorConfig(
            git_branch_command=("stackpeek-missing-tool",),
            git_commit_command=("stackpeek-missing-tool",),
        )
        assert "Git:" not in build_stack_page(AppConfig(), inspector)

    def test_unreadable_sources_degrade(self, tmp_path) -> None:
        inspector = InspectorConfig(
            os_release_path=str(tmp_path / "none"),
            cgroup_path=str(tmp_path / "none"),
            package_manager_command=("stackpeek-missing-tool",),
        )
        page = build_stack_page(AppConfig(), inspector)
        assert "Not available" in page
        assert "not found" in page
