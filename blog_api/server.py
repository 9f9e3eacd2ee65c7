"""
Blog API — Server Lifecycle
===========================

What:  Start and stop the API as an embeddable unit.
How:   `run_server()` connects storage, binds the listening socket, and runs
       uvicorn on it in a background task. `close_server()` stops the
       listener, then disposes storage.
Who:   `python -m blog_api` and the integration tests.

Startup sequence:
    1. Database.connect()        (failure → error propagates, nothing bound)
    2. bind host:port            (failure → storage disposed, OSError propagates)
    3. uvicorn serves the socket (returns once uvicorn reports started)

Shutdown sequence:
    1. uvicorn stops accepting connections and drains in-flight requests
    2. listening socket closed
    3. Database.disconnect()
"""

import asyncio
import logging
import socket
from typing import Optional

import uvicorn

from blog_api.config import settings
from blog_api.database import Database
from blog_api.main import create_app

logger = logging.getLogger(__name__)


class BlogServer:
    """
    Application context for one running API instance.

    Holds the storage handle, the FastAPI app built around it, and the
    uvicorn server that owns the listening socket.
    """

    def __init__(self, database: Database, host: str, port: int):
        self.database = database
        self.host = host
        self.requested_port = port
        self.app = create_app(database)
        self._socket: Optional[socket.socket] = None
        self._server: Optional[uvicorn.Server] = None
        self._serve_task: Optional[asyncio.Task] = None

    @property
    def port(self) -> int:
        """The bound port (differs from the requested one when that was 0)."""
        if self._socket is not None:
            return self._socket.getsockname()[1]
        return self.requested_port

    @property
    def url(self) -> str:
        host = "127.0.0.1" if self.host in ("0.0.0.0", "") else self.host
        if ":" in host:
            host = f"[{host}]"
        return f"http://{host}:{self.port}"

    @property
    def is_serving(self) -> bool:
        return self._serve_task is not None and not self._serve_task.done()

    def _bind_socket(self) -> socket.socket:
        family = socket.AF_INET6 if ":" in self.host else socket.AF_INET
        sock = socket.socket(family=family, type=socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((self.host, self.requested_port))
        except OSError:
            sock.close()
            raise
        sock.set_inheritable(True)
        return sock

    async def start(self) -> None:
        """Connect storage, then bind and serve. Returns once listening."""
        await self.database.connect()

        try:
            self._socket = self._bind_socket()
        except OSError as e:
            logger.error("Could not bind %s:%d: %s", self.host, self.requested_port, e)
            await self.database.disconnect()
            raise

        config = uvicorn.Config(
            self.app,
            host=self.host,
            port=self.port,
            lifespan="on",
            log_config=None,
            access_log=False,
        )
        self._server = uvicorn.Server(config)
        self._serve_task = asyncio.create_task(self._server.serve(sockets=[self._socket]))

        while not self._server.started:
            if self._serve_task.done():
                await self._abort_start()
            await asyncio.sleep(0.01)

        logger.info("Your app is listening on port %d.", self.port)

    async def _abort_start(self) -> None:
        task = self._serve_task
        self._serve_task = None
        self._close_socket()
        await self.database.disconnect()
        if task is not None and not task.cancelled() and task.exception() is not None:
            raise task.exception()
        raise RuntimeError("uvicorn exited before it started listening")

    async def wait_closed(self) -> None:
        """Block until uvicorn stops serving (signal or stop())."""
        if self._serve_task is not None:
            await self._serve_task

    async def stop(self) -> None:
        """Stop the listener, then disconnect storage. Safe to call twice."""
        if self._server is not None and self._serve_task is not None:
            logger.info("Closing server")
            self._server.should_exit = True
            await self._serve_task
            self._serve_task = None
        self._close_socket()
        await self.database.disconnect()

    def _close_socket(self) -> None:
        if self._socket is not None:
            self._socket.close()
            self._socket = None


async def run_server(
    database_url: Optional[str] = None,
    port: Optional[int] = None,
    host: Optional[str] = None,
) -> BlogServer:
    """
    Connect to storage and start listening.

    Defaults come from settings (DATABASE_URL, PORT, HOST). Raises if
    either step fails; nothing is left open in that case.
    """
    server = BlogServer(
        database=Database(database_url or settings.database_url),
        host=host if host is not None else settings.host,
        port=port if port is not None else settings.port,
    )
    await server.start()
    return server


async def close_server(server: BlogServer) -> None:
    """Stop a server started by run_server()."""
    await server.stop()
