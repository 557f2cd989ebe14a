"""Tests for runtime assembly and the command-line entry point."""

import pytest

from aimeAgent import main as cli_module
from aimeAgent.config.settings import ModelSettings, Settings
from aimeAgent.core.orchestrator import RunReport
from aimeAgent.runtime import build_application
from aimeAgent.runtime.model_resolver import build_ai_client


@pytest.fixture
def settings():
    return Settings(_env_file=None)


class TestBuildApplication:
    @pytest.mark.asyncio
    async def test_without_mcp_config(self, settings, scripted_ai, tmp_path):
        orchestrator = await build_application(
            settings=settings,
            ai_client=scripted_ai(),
            mcp_config_path=tmp_path / "missing.yaml",
            interactive=False,
        )

        assert orchestrator.tool_bus.tool_names == ["now", "calc", "save_to_memory", "read_from_memory"]
        assert orchestrator.tool_bus.list_remote_servers() == []
        assert orchestrator.max_turns == settings.governance.max_turns

    @pytest.mark.mcp
    @pytest.mark.asyncio
    async def test_shipped_config_connects_math_server(self, settings, scripted_ai):
        orchestrator = await build_application(settings=settings, ai_client=scripted_ai())
        try:
            assert "ask_user" in orchestrator.tool_bus.tool_names
            assert "divide" in orchestrator.tool_bus.tool_names
            assert await orchestrator.tool_bus.execute_tool("subtract", {"a": 10, "b": 4}) == "6"
        finally:
            await orchestrator.tool_bus.close_all_connections()


def test_missing_api_key_is_reported():
    settings = Settings(_env_file=None, model=ModelSettings(_env_file=None, api_key=None))

    with pytest.raises(RuntimeError, match="Missing API key"):
        build_ai_client(settings)


class TestCli:
    @pytest.fixture(autouse=True)
    def quiet_logging(self, monkeypatch):
        # setup_logging would detach the package logger from caplog and write log files
        monkeypatch.setattr(cli_module, "setup_logging", lambda *args, **kwargs: None)

    def test_parse_args(self):
        args = cli_module.parse_args(["--max-turns", "9", "--non-interactive", "Plan a trip"])

        assert args.goal == "Plan a trip"
        assert args.max_turns == 9
        assert args.non_interactive is True
        assert args.mcp_config is None

    @pytest.mark.parametrize("option", ["--max-turns", "--max-iterations"])
    def test_budget_options_must_be_positive(self, option, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli_module.parse_args([option, "0", "Plan a trip"])

        assert exc_info.value.code == 2
        assert "must be at least 1" in capsys.readouterr().err

    def test_budget_option_above_limit_fails_startup(self, monkeypatch, capsys):
        async def unexpected_build(**kwargs):
            raise AssertionError("build_application should not run")

        monkeypatch.setattr(cli_module, "build_application", unexpected_build)

        assert cli_module.cli(["--max-iterations", "51", "Plan a trip"]) == 1
        assert "Invalid budget option" in capsys.readouterr().err

    def test_budget_override_leaves_cached_settings_alone(self, monkeypatch):
        seen = {}

        async def capture_build(settings, **kwargs):
            seen["settings"] = settings
            raise RuntimeError("stop here")

        monkeypatch.setattr(cli_module, "build_application", capture_build)
        cached_turns = cli_module.get_settings().governance.max_turns

        assert cli_module.cli(["--max-turns", "7", "Plan a trip"]) == 1

        assert seen["settings"].governance.max_turns == 7
        assert cli_module.get_settings().governance.max_turns == cached_turns

    def test_exit_codes_follow_the_run(self, monkeypatch, scripted_ai, capsys):
        class FakeOrchestrator:
            def __init__(self, finished):
                self.finished = finished
                self.tool_bus = self

            async def run(self, goal):
                return RunReport(
                    goal=goal,
                    turns=3,
                    finished=self.finished,
                    budget_exhausted=not self.finished,
                    final_report="All done",
                    tree="[√] goal (ID: 1)",
                )

            async def close_all_connections(self):
                pass

        for finished, code in ((True, 0), (False, 2)):

            async def fake_build(finished=finished, **kwargs):
                return FakeOrchestrator(finished)

            monkeypatch.setattr(cli_module, "build_application", fake_build)
            assert cli_module.cli(["--non-interactive", "Plan a trip"]) == code

        assert "All done" in capsys.readouterr().out

    def test_startup_failure(self, monkeypatch, capsys):
        async def failing_build(**kwargs):
            raise RuntimeError("Missing API key for model gpt-4o-mini")

        monkeypatch.setattr(cli_module, "build_application", failing_build)

        assert cli_module.cli(["Plan a trip"]) == 1
        assert "Startup failed" in capsys.readouterr().err
