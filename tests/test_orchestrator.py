"""
Tests for the tool runner.
"""

import asyncio
import logging
from pathlib import Path
from unittest.mock import AsyncMock, Mock, patch

import pytest
import yaml

from hostkit.orchestrator import TOOLS, ToolRunner
from hostkit.utils.error_handling import ErrorCategory, get_error_tracker


@pytest.fixture
def sample_config(tmp_path: Path) -> dict:
    """Configuration keeping every path inside the test directory."""
    return {
        "logging": {"log_dir": str(tmp_path / "logs"), "log_level": "DEBUG"},
        "downloads": {
            "watch_path": str(tmp_path / "downloads"),
            "sorted_path": str(tmp_path / "downloads" / "sorted"),
            "history_file": str(tmp_path / "data" / "history.json"),
            "stability_threshold_ms": 0,
        },
        "branches": {"scan_path": str(tmp_path / "projects")},
        "network": {
            "devices_file": str(tmp_path / "data" / "devices.json"),
            "resolve_hostnames": False,
        },
        "ports": {"preferences_file": str(tmp_path / "data" / "preferences.json")},
    }


@pytest.fixture
def config_file(tmp_path: Path, sample_config: dict) -> str:
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump(sample_config))
    return str(path)


class TestToolRunner:
    def test_tools(self):
        assert TOOLS == ["downloads", "branches", "network", "ports"]

    def test_unknown_tool(self):
        with pytest.raises(ValueError, match="Unknown tool"):
            ToolRunner("printers")

    @pytest.mark.parametrize(
        "tool,port,jobs",
        [("downloads", 3001, 1), ("branches", 3002, 0), ("network", 3003, 1), ("ports", 3004, 1)],
    )
    def test_build(self, config_file: str, tool: str, port: int, jobs: int):
        runner = ToolRunner(tool, config_path=config_file)

        app = runner.build()

        assert app.state.tool == tool
        assert runner.tool_port() == port
        assert len(runner._jobs) == jobs

    def test_build_downloads_creates_directories(self, config_file: str, tmp_path: Path):
        app = ToolRunner("downloads", config_path=config_file).build()

        assert (tmp_path / "downloads" / "sorted").is_dir()
        assert app.state.sorter.history is app.state.history

    def test_network_without_auto_scan(self, tmp_path: Path, sample_config: dict):
        sample_config["network"]["auto_scan"] = False
        path = tmp_path / "manual.yaml"
        path.write_text(yaml.dump(sample_config))

        runner = ToolRunner("network", config_path=str(path))
        runner.build()

        assert runner._jobs == []

    def test_log_level_override(self, config_file: str):
        runner = ToolRunner("ports", config_path=config_file, log_level="WARNING")

        runner.load_configuration()

        assert logging.getLogger("hostkit").level == logging.WARNING
        ToolRunner("ports", config_path=config_file, log_level="DEBUG").load_configuration()

    @pytest.mark.asyncio
    async def test_initialize(self, config_file: str):
        runner = ToolRunner("branches", config_path=config_file)

        assert await runner.initialize() is True
        assert runner.get_status()["startup_time"] is not None

    @pytest.mark.asyncio
    async def test_initialize_missing_config(self, tmp_path: Path):
        runner = ToolRunner("ports", config_path=str(tmp_path / "missing.yaml"))

        assert await runner.initialize() is False

        errors = get_error_tracker().get_component_errors("orchestrator")
        assert errors[0].category == ErrorCategory.CONFIGURATION

    @pytest.mark.asyncio
    async def test_background_jobs_stop(self, config_file: str):
        runner = ToolRunner("branches", config_path=config_file)
        started = asyncio.Event()

        async def job(stop_event: asyncio.Event) -> None:
            started.set()
            await stop_event.wait()

        runner._jobs = [job]
        runner.start_background()
        await asyncio.wait_for(started.wait(), timeout=1)

        assert runner.get_status()["background_tasks"] == 1

        await runner.stop_background()
        assert runner.get_status()["background_tasks"] == 0

    @pytest.mark.asyncio
    async def test_failing_job_is_recorded(self, config_file: str):
        runner = ToolRunner("branches", config_path=config_file)

        async def job(stop_event: asyncio.Event) -> None:
            raise RuntimeError("watcher died")

        runner._jobs = [job]
        runner.start_background()
        await asyncio.gather(*runner._tasks)
        await runner.stop_background()

        errors = get_error_tracker().get_component_errors("orchestrator")
        assert "watcher died" in errors[0].message

    @pytest.mark.asyncio
    async def test_run_serves_and_shuts_down(self, config_file: str):
        runner = ToolRunner("ports", config_path=config_file)
        server = Mock()
        server.serve = AsyncMock()

        with patch("hostkit.orchestrator.uvicorn.Server", return_value=server) as server_cls, \
                patch("hostkit.orchestrator.uvicorn.Config") as config_cls:
            result = await runner.run()

        assert result is True
        server.serve.assert_awaited_once()
        server_cls.assert_called_once_with(config_cls.return_value)
        assert config_cls.call_args.kwargs["port"] == 3004
        assert config_cls.call_args.kwargs["host"] == "127.0.0.1"
        assert runner._tasks == []

    @pytest.mark.asyncio
    async def test_run_without_config(self, tmp_path: Path):
        runner = ToolRunner("ports", config_path=str(tmp_path / "missing.yaml"))

        with patch("hostkit.orchestrator.uvicorn.Server") as server_cls:
            assert await runner.run() is False

        server_cls.assert_not_called()
