"""
Tool runner for hostkit.

This module wires one tool's stores and components together, starts its
background work (file watcher or periodic scanner) and serves its HTTP API
with uvicorn until shutdown.
"""

import asyncio
from datetime import datetime
from typing import Any, Callable, Coroutine, Dict, List, Optional

import uvicorn
from fastapi import FastAPI

from .api import ROUTERS, create_app
from .components.branch_classifier import BranchClassifier
from .components.download_sorter import DownloadSorter
from .components.network_scanner import NetworkScanner
from .components.port_scanner import PortScanner
from .models.config import Configuration
from .services.config_manager import ConfigurationManager
from .services.device_store import DeviceStore
from .services.history_store import HistoryStore
from .services.preference_store import PreferenceStore
from .services.repository_cache import RepositoryCache
from .services.scan_state import ScanState
from .utils.error_handling import (
    ErrorCategory,
    ErrorSeverity,
    get_error_tracker,
    with_error_handling,
)
from .utils.logging import get_logger, setup_logging

TOOLS = list(ROUTERS)

BackgroundJob = Callable[[asyncio.Event], Coroutine[Any, Any, None]]


class ToolRunner:
    """
    Runs a single hostkit tool.

    The runner owns the tool's stores and scanners; the HTTP layer only
    receives references to them through ``app.state``.
    """

    def __init__(
        self,
        tool: str,
        config_path: Optional[str] = None,
        log_level: Optional[str] = None,
    ):
        """
        Initialize the runner.

        Args:
            tool: One of "downloads", "branches", "network", "ports"
            config_path: Path to configuration file. If None, uses default paths.
            log_level: Overrides the configured log level
        """
        if tool not in TOOLS:
            raise ValueError(f"Unknown tool: {tool}. Choose one of: {', '.join(TOOLS)}")

        self.tool = tool
        self.config_path = config_path
        self.log_level = log_level
        self.logger = get_logger("orchestrator")
        self.error_tracker = get_error_tracker()

        self.config: Optional[Configuration] = None
        self.app: Optional[FastAPI] = None
        self._jobs: List[BackgroundJob] = []
        self._tasks: List[asyncio.Task] = []
        self._stop_event: Optional[asyncio.Event] = None
        self._startup_time: Optional[datetime] = None

    def load_configuration(self) -> Configuration:
        """Load configuration and point logging at the configured directory."""
        config = ConfigurationManager(self.config_path).load_config()
        setup_logging(
            log_dir=config.logging.log_dir,
            log_level=self.log_level or config.logging.log_level,
        )
        self.logger = get_logger("orchestrator", {"tool": self.tool})
        self.config = config
        return config

    def build(self) -> FastAPI:
        """Create the tool's components and its FastAPI application."""
        if self.config is None:
            self.load_configuration()

        builder = getattr(self, f"_build_{self.tool}")
        self.app = builder(self.config)
        self.logger.info("Components initialized")
        return self.app

    def _build_downloads(self, config: Configuration) -> FastAPI:
        downloads = config.downloads
        history = HistoryStore(downloads.history_file)
        sorter = DownloadSorter(downloads, history)
        sorter.prepare_directories()

        async def watch(stop_event: asyncio.Event) -> None:
            await asyncio.get_running_loop().run_in_executor(None, sorter.sort_existing)
            await sorter.watch(stop_event)

        self._jobs.append(watch)
        return create_app("downloads", sorter=sorter, history=history, config=downloads)

    def _build_branches(self, config: Configuration) -> FastAPI:
        branches = config.branches
        classifier = BranchClassifier(branches.base_branches, branches.protected_branches)
        repositories = RepositoryCache(branches.scan_path)
        return create_app(
            "branches", classifier=classifier, repositories=repositories, config=branches
        )

    def _build_network(self, config: Configuration) -> FastAPI:
        network = config.network
        device_store = DeviceStore(network.devices_file)
        scanner = NetworkScanner(network, device_store, ScanState([]))

        if network.auto_scan:
            self._jobs.append(scanner.run_periodic)
        return create_app(
            "network", device_store=device_store, scanner=scanner, config=network
        )

    def _build_ports(self, config: Configuration) -> FastAPI:
        ports = config.ports
        scanner = PortScanner(ScanState([]))
        preferences = PreferenceStore(
            ports.preferences_file, ports.default_preferences_file or None
        )

        async def refresh(stop_event: asyncio.Event) -> None:
            await scanner.run_periodic(ports.refresh_interval, stop_event)

        self._jobs.append(refresh)
        return create_app("ports", scanner=scanner, preferences=preferences, config=ports)

    def tool_port(self) -> int:
        return getattr(self.config, self.tool).port

    async def _run_job(self, job: BackgroundJob) -> None:
        try:
            await job(self._stop_event)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.error_tracker.record_error(
                component="orchestrator",
                category=ErrorCategory.SYSTEM,
                severity=ErrorSeverity.HIGH,
                message=f"Background job failed: {e}",
                exception=e,
                context={"tool": self.tool},
            )

    def start_background(self) -> None:
        self._stop_event = asyncio.Event()
        self._tasks = [asyncio.create_task(self._run_job(job)) for job in self._jobs]

    async def stop_background(self) -> None:
        if self._stop_event is not None:
            self._stop_event.set()

        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []

    @with_error_handling(
        component="orchestrator",
        category=ErrorCategory.CONFIGURATION,
        severity=ErrorSeverity.CRITICAL,
        fallback_value=False,
        suppress_exceptions=True,
    )
    async def initialize(self) -> bool:
        """
        Load configuration and build the tool.

        Returns:
            True if initialization succeeded, False otherwise.
        """
        self.load_configuration()
        self.build()
        self._startup_time = datetime.now()
        return True

    def get_status(self) -> Dict[str, Any]:
        return {
            "tool": self.tool,
            "startup_time": self._startup_time.isoformat() if self._startup_time else None,
            "background_tasks": len(self._tasks),
            "errors": self.error_tracker.get_error_stats(),
        }

    async def run(self) -> bool:
        """
        Run the tool until the server stops.

        Returns:
            False if the tool could not be initialized
        """
        if not await self.initialize():
            self.logger.error("Initialization failed")
            return False

        server = uvicorn.Server(
            uvicorn.Config(
                self.app,
                host=self.config.server.host,
                port=self.tool_port(),
                log_level=(self.log_level or self.config.logging.log_level).lower(),
            )
        )

        self.logger.info(
            f"Starting {self.tool} on http://{self.config.server.host}:{self.tool_port()}"
        )
        self.start_background()
        try:
            await server.serve()
        finally:
            await self.stop_background()
            uptime = datetime.now() - self._startup_time if self._startup_time else None
            self.logger.info(f"Shutdown complete. Uptime: {uptime}")
        return True
