"""
RoutewireServer - assembles an Application from a DI container.

Build order is fixed: application-level config first, then the
controller router mounted at the routing root path, then error config.
"""

from typing import Any, Callable, Optional
import logging

from .application import Application
from .config import ConfigLoader, RoutingConfig, ServerConfig
from .controller.metadata import MetadataRegistry
from .controller.router import ControllerRouter
from .di import Container
from .routing import Router


ConfigFunction = Callable[[Application], Any]

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "info") -> None:
    """Configure root logging for CLI and development runs."""
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level!r}")
    logging.basicConfig(level=numeric, format=LOG_FORMAT)


class RoutewireServer:
    """
    Wrapper that turns controllers registered in a container into an ASGI app.

    Example:
        server = RoutewireServer(container)
        server.set_config(lambda app: app.use(request_logger))
        server.set_error_config(lambda app: app.use(json_errors))
        app = server.build()
    """

    def __init__(
        self,
        container: Container,
        router: Optional[Router] = None,
        routing_config: Optional[RoutingConfig] = None,
        app: Optional[Application] = None,
        *,
        registry: Optional[MetadataRegistry] = None,
        server_config: Optional[ServerConfig] = None,
    ):
        self.container = container
        self.routing_config = routing_config or RoutingConfig()
        self.server_config = server_config or ServerConfig()
        if router is None:
            router = Router(
                case_sensitive=self.routing_config.case_sensitive,
                strict=self.routing_config.strict,
            )
        self.controller_router = ControllerRouter(container, router, registry)
        self.app = app or Application(debug=self.server_config.debug)
        self.logger = logging.getLogger("routewire.server")

        self._config_fn: Optional[ConfigFunction] = None
        self._error_config_fn: Optional[ConfigFunction] = None
        self._built = False

    @classmethod
    def from_config(
        cls,
        container: Container,
        loader: Optional[ConfigLoader] = None,
        **kwargs: Any,
    ) -> "RoutewireServer":
        """Create a server whose routing/server settings come from a ConfigLoader."""
        loader = loader or ConfigLoader.load()
        return cls(
            container,
            routing_config=RoutingConfig.from_loader(loader),
            server_config=ServerConfig.from_loader(loader),
            **kwargs,
        )

    @property
    def table(self):
        return self.controller_router.table

    def set_config(self, fn: ConfigFunction) -> "RoutewireServer":
        """
        Set the function that registers app-level middleware.

        It is not executed until :meth:`build`. Chainable.
        """
        self._config_fn = fn
        return self

    def set_error_config(self, fn: ConfigFunction) -> "RoutewireServer":
        """
        Set the function that registers app-level error handlers.

        It is not executed until :meth:`build`. Chainable.
        """
        self._error_config_fn = fn
        return self

    def build_router(self) -> Router:
        """Compile controller routes into the router (once)."""
        if self.controller_router.table is None:
            self.controller_router.build()
        return self.controller_router.router

    def build(self) -> Application:
        """
        Apply configuration and routes, returning the application.

        Calling ``build`` again returns the same application without
        re-running the config functions.
        """
        if self._built:
            return self.app

        if self._config_fn is not None:
            self._config_fn(self.app)

        self.app.use(self.routing_config.root_path, self.build_router())

        if self._error_config_fn is not None:
            self._error_config_fn(self.app)

        self._built = True
        self.logger.info(
            "Built application: %d routes mounted at %s",
            len(self.controller_router.table),
            self.routing_config.root_path,
        )
        return self.app

    build_application = build

    def run(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        reload: bool = False,
        log_level: Optional[str] = None,
    ):
        """
        Run the application under uvicorn.

        Args:
            host: Host to bind to (default from ServerConfig)
            port: Port to bind to (default from ServerConfig)
            reload: Enable auto-reload
            log_level: Logging level (default from ServerConfig)
        """
        import uvicorn

        host = host or self.server_config.host
        port = port if port is not None else self.server_config.port
        log_level = log_level or self.server_config.log_level

        configure_logging(log_level)
        app = self.build()

        self.logger.info(f"Starting uvicorn server on {host}:{port}")
        uvicorn.run(app, host=host, port=port, reload=reload, log_level=log_level)
