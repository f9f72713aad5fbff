"""
Crieur - real-time channel broker

Orchestrates Clean Architecture components to provide per-channel
presence, targeted event delivery with optional acknowledgements and an
append-only event history.
"""

import asyncio
import logging
import os
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from crieur.config.settings import Settings, load_config
from crieur.di import Container
from crieur.presentation.api.dependencies import set_container
from crieur.presentation.api.routes import emit_router, history_router, listen_router
from crieur.reporter import SystemReporter
from crieur.reporter.emojis import Emoji


class CrieurApp:
    """
    Crieur application orchestrator.

    Thin coordination layer that initializes and connects
    all Clean Architecture components.

    Responsibilities:
        - Initialize DI container
        - Setup FastAPI application
        - Register API routes
        - Manage application lifecycle with graceful shutdown
        - Run uvicorn server
    """

    def __init__(self, settings: Settings):
        """
        Initialize Crieur application.

        Args:
            settings: Application settings
        """
        self.settings = settings

        # Initialize reporter FIRST
        self.reporter = self._create_reporter()

        # Initialize container with reporter
        self.container = Container(settings, reporter=self.reporter)

        # Create FastAPI app
        self.app = self._create_app()

        # Set global container for FastAPI dependencies
        set_container(self.container)

        # Server instance (set during serve)
        self.server: Optional[uvicorn.Server] = None

        self.reporter.info(
            "Crieur initialized",
            context="Crieur",
            verbose_level=1,
        )

    def _create_reporter(self) -> SystemReporter:
        """
        Create SystemReporter instance.

        Returns:
            Configured SystemReporter
        """
        log_dir = None

        if self.settings.log_file:
            log_dir = os.path.dirname(self.settings.log_file)
            if not log_dir:
                log_dir = "logs"

        return SystemReporter(
            name="crieur",
            log_dir=log_dir,
            level=getattr(logging, self.settings.log_level.upper()),
            verbose=self.settings.verbose,
        )

    def _create_app(self) -> FastAPI:
        """
        Create FastAPI application with lifespan management.

        Returns:
            Configured FastAPI application
        """

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            """Application lifespan context manager with graceful shutdown."""
            await self._on_startup()

            yield

            await self._on_shutdown()

        app = FastAPI(
            title="Crieur",
            description="Real-time channel broker",
            version=self.settings.APP_VERSION,
            lifespan=lifespan,
        )

        # Register routes from presentation layer
        app.include_router(history_router)
        app.include_router(listen_router)
        app.include_router(emit_router)

        return app

    async def _on_startup(self):
        """
        Application startup event handler.

        Connects the history store and logs the effective configuration.
        """
        self.reporter.info(
            f"{Emoji.SYSTEM.STARTUP} Crieur starting...",
            context="Crieur",
            verbose_level=1,
        )

        await self.container.connect_store()

        self.reporter.info(
            f"Host: {self.settings.host}:{self.settings.port}",
            context="Crieur",
            verbose_level=1,
        )
        self.reporter.info(
            f"History store: {self.settings.store_backend}",
            context="Crieur",
            verbose_level=1,
        )
        self.reporter.info(
            f"Heartbeat: {self.settings.heartbeat_interval_ms}ms "
            f"(limit {self.settings.ping_timeout_limit} missed pings), "
            f"ack timeout: {self.settings.ack_timeout_ms}ms",
            context="Crieur",
            verbose_level=2,
        )
        self.reporter.info(
            f"{Emoji.SYSTEM.READY} Crieur ready",
            context="Crieur",
            verbose_level=1,
        )

    async def _on_shutdown(self):
        """
        Application shutdown event handler.

        Waits the grace period while clients are still connected, then
        stops every channel actor and disconnects the store.
        """
        self.reporter.info(
            f"{Emoji.SYSTEM.SHUTDOWN} Crieur shutting down...",
            context="Crieur",
            verbose_level=1,
        )

        directory = self.container.directory
        connected = sum(directory.get(name).client_count for name in directory.names)
        grace_period = self.settings.shutdown_grace_period

        if connected and grace_period:
            self.reporter.info(
                f"Waiting {grace_period}s for {connected} client(s) to close",
                context="Crieur",
                verbose_level=1,
            )
            await asyncio.sleep(grace_period)

        await self.container.shutdown()

        self.reporter.info(
            "Crieur stopped",
            context="Crieur",
            verbose_level=1,
        )

    async def serve(self):
        """
        Run server with proper signal handling.

        Uses uvicorn.Server API for proper shutdown control.
        """
        config = uvicorn.Config(
            self.app,
            host=self.settings.host,
            port=self.settings.port,
            log_level=self.settings.log_level,
        )
        self.server = uvicorn.Server(config)
        await self.server.serve()

    def start(self):
        """
        Start Crieur server.

        Runs uvicorn server with configured host and port.
        Blocks until server is stopped.
        """
        asyncio.run(self.serve())


def main():
    """
    Main entry point for Crieur application.

    Loads configuration and starts the server.
    """
    config = load_config()

    # Allow port override from command line
    if len(sys.argv) > 1:
        try:
            config.port = int(sys.argv[1])
        except ValueError:
            print(f"Invalid port: {sys.argv[1]}")
            sys.exit(1)

    app = CrieurApp(config)

    try:
        app.start()
    except KeyboardInterrupt:
        print("\nCrieur stopped by user")
        sys.exit(0)


if __name__ == "__main__":
    main()
