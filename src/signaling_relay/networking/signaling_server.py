"""
WebSocket transport for the signaling relay.

Accepts client connections, decodes frames, feeds them to the lifecycle
manager and queues the deliveries it returns. This module is the outermost
fault boundary: a failure while handling one frame is logged and abandoned
without touching other connections.
"""

import asyncio
import logging
import signal
import sys
from typing import Dict, Hashable, Iterable, Optional, Tuple

from websockets.asyncio.server import Server, ServerConnection, serve
from websockets.exceptions import ConnectionClosed

from ..config import RelayConfig, RelayConfigManager
from ..core import Delivery, LifecycleManager
from ..infrastructure import (
    ConfigurationError,
    MessageValidationError,
    get_logger,
    setup_logging,
)
from .codec import decode_message, encode_message

logger = get_logger(__name__)


class SignalingServer:
    """WebSocket signaling relay server."""

    def __init__(
        self,
        host: str = "0.0.0.0",
        port: int = 3000,
        ping_interval: int = 20,
        max_message_size: int = 2**20,
        max_connections: int = 1000,
        max_queued_frames: int = 256,
        lifecycle: Optional[LifecycleManager] = None,
    ) -> None:
        """
        Initialize the signaling server.

        Args:
            host: Host address to bind to
            port: Port to listen on (0 picks a free port)
            ping_interval: Keepalive ping interval in seconds, 0 disables pings
            max_message_size: Largest accepted frame in bytes
            max_connections: Connections handled concurrently
            max_queued_frames: Frames buffered per connection before new ones are dropped
            lifecycle: Core state to serve; a fresh one is created if omitted
        """
        self.host = host
        self.port = port
        self.ping_interval = ping_interval
        self.max_message_size = max_message_size
        self.max_queued_frames = max_queued_frames
        self.server: Optional[Server] = None

        self.lifecycle = lifecycle if lifecycle is not None else LifecycleManager()
        self._connection_semaphore = asyncio.Semaphore(max_connections)

        # Per-connection outbound queues and the tasks that drain them
        self._outboxes: Dict[Hashable, asyncio.Queue] = {}
        self._writers: Dict[Hashable, asyncio.Task] = {}

        self.stats = {
            "total_connections": 0,
            "messages_received": 0,
            "messages_dropped": 0,
            "deliveries_sent": 0,
            "delivery_failures": 0,
        }

    @classmethod
    def from_config(cls, config: RelayConfig) -> "SignalingServer":
        return cls(
            host=config.host,
            port=config.port,
            ping_interval=config.ping_interval,
            max_message_size=config.max_message_size,
            max_connections=config.max_connections,
        )

    async def start(self) -> bool:
        """Start listening. Returns False if the socket could not be bound."""
        try:
            self.server = await serve(
                self._handle_connection,
                self.host,
                self.port,
                ping_interval=self.ping_interval or None,
                max_size=self.max_message_size,
            )
        except OSError as e:
            logger.error(f"Failed to start signaling server on {self.host}:{self.port}: {e}")
            return False

        logger.info(f"Signaling server started on {self.host}:{self.port}")
        return True

    async def stop(self) -> None:
        """Stop the signaling server."""
        if self.server:
            self.server.close()
            await self.server.wait_closed()
            self.server = None
            logger.info("Signaling server stopped")

    async def _handle_connection(
        self, websocket: ServerConnection, path: Optional[str] = None
    ) -> None:
        """Serve one client connection until it closes."""
        client_address = websocket.remote_address
        logger.info(f"New connection from {client_address}")

        async with self._connection_semaphore:
            self.stats["total_connections"] += 1
            self._attach(websocket)
            try:
                async for message in websocket:
                    if isinstance(message, str):
                        await self._process_message(websocket, message)
                    else:
                        self.stats["messages_dropped"] += 1
                        logger.warning(f"Ignoring binary frame from {client_address}")
            except ConnectionClosed:
                logger.info(f"Connection closed: {client_address}")
            except Exception as e:
                logger.error(
                    f"Error handling connection from {client_address}: {e}",
                    exc_info=True,
                )
            finally:
                await self._detach(websocket)

    def _attach(self, websocket: ServerConnection) -> None:
        """Track a live connection and start its outbound writer."""
        self.lifecycle.connect(websocket)
        outbox: asyncio.Queue = asyncio.Queue(maxsize=self.max_queued_frames)
        self._outboxes[websocket] = outbox
        self._writers[websocket] = asyncio.create_task(
            self._write_outbox(websocket, outbox)
        )

    async def _detach(self, websocket: ServerConnection) -> None:
        """Run disconnect cleanup, then stop the connection's writer."""
        try:
            deliveries = self.lifecycle.disconnect(websocket)
        except Exception as e:
            logger.error(f"Error cleaning up connection: {e}", exc_info=True)
        else:
            self._deliver(deliveries)

        self._outboxes.pop(websocket, None)
        writer = self._writers.pop(websocket, None)
        if writer is not None:
            writer.cancel()
            try:
                await writer
            except asyncio.CancelledError:
                pass

    async def _process_message(self, websocket: ServerConnection, raw: str) -> None:
        """Decode and dispatch one text frame, then queue its effects."""
        self.stats["messages_received"] += 1
        try:
            message = decode_message(raw)
        except MessageValidationError as e:
            self.stats["messages_dropped"] += 1
            logger.warning(f"Dropping malformed message from {websocket.remote_address}: {e}")
            return

        try:
            deliveries = self.lifecycle.handle_message(websocket, message)
        except Exception as e:
            self.stats["messages_dropped"] += 1
            logger.error(f"Error processing {message.kind} message: {e}", exc_info=True)
            return

        self._deliver(deliveries)

    def _deliver(self, deliveries: Iterable[Delivery]) -> None:
        """
        Queue deliveries on their connections' outboxes without waiting.

        Each outbox is written by its own task, so frames to one connection
        keep their order and a slow reader only delays itself.
        """
        frames: Dict[int, str] = {}
        for delivery in deliveries:
            target = delivery.recipient or "broadcast"
            outbox = self._outboxes.get(delivery.handle)
            if outbox is None:
                self.stats["delivery_failures"] += 1
                logger.debug(f"No live connection for {delivery.message.kind} to {target}")
                continue

            key = id(delivery.message)
            if key not in frames:
                frames[key] = encode_message(delivery.message)
            try:
                outbox.put_nowait((delivery, frames[key]))
            except asyncio.QueueFull:
                self.stats["delivery_failures"] += 1
                logger.warning(
                    f"Outbox full, dropping {delivery.message.kind} to {target}"
                )

    async def _write_outbox(
        self, handle: Hashable, outbox: "asyncio.Queue[Tuple[Delivery, str]]"
    ) -> None:
        """Send queued frames to one connection, in order, until cancelled."""
        while True:
            delivery, frame = await outbox.get()
            target = delivery.recipient or "broadcast"
            try:
                await handle.send(frame)
                self.stats["deliveries_sent"] += 1
            except ConnectionClosed:
                self.stats["delivery_failures"] += 1
                logger.debug(f"Recipient {target} closed before {delivery.message.kind} was sent")
            except Exception as e:
                self.stats["delivery_failures"] += 1
                logger.error(f"Error sending {delivery.message.kind} to {target}: {e}")
            finally:
                outbox.task_done()

    def get_stats(self) -> dict:
        """Get server statistics."""
        return {
            "server_running": self.server is not None,
            **self.stats,
            **self.lifecycle.get_stats(),
        }


def configure_logging(config: RelayConfig) -> logging.Logger:
    """Set up package logging; an unset level falls back to ENVIRONMENT."""
    return setup_logging(
        component_name="signaling_relay",
        log_level=config.log_level,
        log_file=config.log_file,
    )


async def main(config: Optional[RelayConfig] = None) -> int:
    """Run the signaling server until interrupted. Returns an exit code."""
    if config is None:
        try:
            config = RelayConfigManager().get_config()
        except ConfigurationError as e:
            logger.critical(f"Invalid configuration: {e}")
            return 1

    configure_logging(config)

    server = SignalingServer.from_config(config)
    if not await server.start():
        return 1

    stop = asyncio.get_running_loop().create_future()
    if sys.platform != "win32":
        asyncio.get_running_loop().add_signal_handler(signal.SIGTERM, stop.cancel)

    logger.info("Signaling server running. Press Ctrl+C to stop.")
    try:
        await stop
    except asyncio.CancelledError:
        logger.info("Shutting down signaling server...")
    finally:
        await server.stop()
    return 0


def run() -> None:
    """Console script entry point."""
    try:
        exit_code = asyncio.run(main())
    except KeyboardInterrupt:
        exit_code = 0
    sys.exit(exit_code)


if __name__ == "__main__":
    run()
