"""Streaming client for the enhanced websocket that pushes transaction and account updates."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import weakref
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

import semver
import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from .keys import Pubkey

ENHANCED_WEBSOCKET_URL = "wss://atlas-mainnet.helius-rpc.com?api-key="
DEFAULT_PING_INTERVAL = 10.0

_log = logging.getLogger(__name__)
_END = object()
_U64_LIMIT = 1 << 64

Parser = Callable[[Any], Any]


class EnhancedWebsocketError(Exception):
    """The server sent something the client cannot accept."""

    def __init__(self, reason: str, message: str = "") -> None:
        super().__init__(f"{reason}: {message}" if message else reason)
        self.reason = reason
        self.message = message


class WebsocketClosedError(ConnectionError):
    """The websocket connection is closed or closed before answering."""


@dataclass
class _Subscribe:
    operation: str
    params: Any
    parse: Parser
    future: asyncio.Future


@dataclass
class _Unsubscribe:
    operation: str
    subscription_id: int
    future: Optional[asyncio.Future]


def _as_u64(value: Any) -> Optional[int]:
    if isinstance(value, int) and not isinstance(value, bool) and 0 <= value < _U64_LIMIT:
        return value
    return None


def _error_reason(error: Any) -> str:
    if isinstance(error, dict):
        code = error.get("code")
        message = error.get("message")
        if isinstance(code, int) and not isinstance(code, bool) and isinstance(message, str):
            return f"{message} ({code})"
        problem = "missing or invalid `code` or `message` field"
    else:
        problem = "expected an object"
    encoded = json.dumps(error, separators=(",", ":"))
    return f"Failed to deserialize RPC error response: {encoded} [{problem}]"


def _transaction_notification(value: Any) -> dict:
    if not isinstance(value, dict):
        raise TypeError("expected a transaction notification object")
    return value


def _account_notification(value: Any) -> dict:
    if not isinstance(value, dict) or "context" not in value or "value" not in value:
        raise ValueError("expected an object with `context` and `value` fields")
    return value


def _fail(future: Optional[asyncio.Future]) -> None:
    if future is not None and not future.done():
        future.set_exception(WebsocketClosedError("websocket closed"))


def _finish(future: Optional[asyncio.Future]) -> None:
    if future is not None and not future.done():
        future.set_result(None)


class Subscription:
    """An async iterator over the notifications of one server subscription."""

    def __init__(self, operation: str, subscription_id: int, client: "EnhancedWebsocket", parse: Parser) -> None:
        self.operation = operation
        self.id = subscription_id
        self._client = client
        self._parse = parse
        self._queue: asyncio.Queue = asyncio.Queue()
        self._finished = False

    def __repr__(self) -> str:
        return f"Subscription(operation={self.operation!r}, id={self.id})"

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> Any:
        while not self._finished:
            value = await self._queue.get()
            if value is _END:
                self._finished = True
                break
            try:
                return self._parse(value)
            except (TypeError, ValueError, KeyError) as exc:
                _log.warning("Failed to parse websocket notification: %s for value: %r", exc, value)
        raise StopAsyncIteration

    async def unsubscribe(self) -> None:
        """Ask the server to stop this subscription; do nothing if the socket is closed."""
        await self._client._unsubscribe(self.operation, self.id)

    def _deliver(self, value: Any) -> None:
        self._queue.put_nowait(value)

    def _close(self) -> None:
        self._queue.put_nowait(_END)


class EnhancedWebsocket:
    """Client for transaction and account subscriptions over an enhanced websocket."""

    def __init__(self, connection: Any, ping_interval: float = DEFAULT_PING_INTERVAL) -> None:
        self._ws = connection
        self._ping_interval = ping_interval
        self._commands: asyncio.Queue = asyncio.Queue()
        self._shutdown = asyncio.Event()
        self._node_version: Optional[semver.Version] = None
        self._request_id = 0
        self._pending_subscribe: dict[int, _Subscribe] = {}
        self._pending_unsubscribe: dict[int, Optional[asyncio.Future]] = {}
        self._subscriptions: dict[int, weakref.ref] = {}
        self._task = asyncio.get_running_loop().create_task(self._run())

    @classmethod
    async def connect(cls, url: str) -> "EnhancedWebsocket":
        """Open a connection to an enhanced websocket endpoint."""
        try:
            connection = await websockets.connect(url, ping_interval=None)
        except (OSError, WebSocketException, asyncio.TimeoutError, ValueError) as exc:
            raise EnhancedWebsocketError("failed to connect", str(exc)) from exc
        return cls(connection)

    async def __aenter__(self) -> "EnhancedWebsocket":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.shutdown()

    async def shutdown(self) -> None:
        """Close the connection normally and re-raise any error that stopped the client."""
        self._shutdown.set()
        await self._task

    @property
    def node_version(self) -> Optional[semver.Version]:
        return self._node_version

    def set_node_version(self, version: Union[str, semver.Version]) -> None:
        """Record the version of the node on the other end."""
        if isinstance(version, str):
            version = semver.Version.parse(version)
        elif not isinstance(version, semver.Version):
            raise TypeError(f"expected a version, got {type(version).__name__}")
        self._node_version = version

    async def transaction_subscribe(self, filter: Any, options: Any) -> Subscription:
        """Subscribe to transactions matching a filter."""
        return await self._subscribe("transaction", [filter, options], _transaction_notification)

    async def account_subscribe(self, pubkey: Union[Pubkey, str], config: Any = None) -> Subscription:
        """Subscribe to updates of one account."""
        return await self._subscribe("account", [str(pubkey), config], _account_notification)

    async def _subscribe(self, operation: str, params: Any, parse: Parser) -> Subscription:
        if self._task.done():
            raise WebsocketClosedError("websocket closed")
        future = asyncio.get_running_loop().create_future()
        self._commands.put_nowait(_Subscribe(operation, params, parse, future))
        return await future

    async def _unsubscribe(self, operation: str, subscription_id: int) -> None:
        if self._task.done():
            return
        future = asyncio.get_running_loop().create_future()
        self._commands.put_nowait(_Unsubscribe(operation, subscription_id, future))
        with contextlib.suppress(WebsocketClosedError):
            await future

    async def _send(self, request_id: int, method: str, params: Any) -> None:
        body = {"jsonrpc": "2.0", "id": request_id, "method": method, "params": params}
        await self._ws.send(json.dumps(body))

    async def _run(self) -> None:
        recv_task: Optional[asyncio.Future] = None
        cmd_task: Optional[asyncio.Future] = None
        shutdown_task = asyncio.ensure_future(self._shutdown.wait())
        try:
            while True:
                if recv_task is None:
                    recv_task = asyncio.ensure_future(self._ws.recv())
                if cmd_task is None:
                    cmd_task = asyncio.ensure_future(self._commands.get())
                done, _ = await asyncio.wait(
                    {shutdown_task, recv_task, cmd_task},
                    timeout=self._ping_interval,
                    return_when=asyncio.FIRST_COMPLETED,
                )
                if not done:
                    await self._ws.ping()
                    continue
                if shutdown_task in done:
                    await self._ws.close(code=1000, reason="")
                    break
                if cmd_task in done:
                    command, cmd_task = cmd_task.result(), None
                    await self._dispatch(command)
                if recv_task in done:
                    finished, recv_task = recv_task, None
                    try:
                        message = finished.result()
                    except ConnectionClosed as exc:
                        if getattr(exc, "rcvd", None) is not None:
                            break
                        raise WebsocketClosedError(str(exc)) from exc
                    if isinstance(message, (bytes, bytearray)):
                        continue
                    if not self._handle_text(message):
                        break
        except ConnectionClosed as exc:
            raise WebsocketClosedError(str(exc)) from exc
        finally:
            await self._tear_down(recv_task, cmd_task, shutdown_task)

    async def _tear_down(self, *tasks: Optional[asyncio.Future]) -> None:
        running = [task for task in tasks if task is not None]
        for task in running:
            if not task.done():
                task.cancel()
        await asyncio.gather(*running, return_exceptions=True)
        leftover = []
        cmd_task = tasks[1]
        if cmd_task is not None and cmd_task.done() and not cmd_task.cancelled() and cmd_task.exception() is None:
            leftover.append(cmd_task.result())
        with contextlib.suppress(Exception):
            await self._ws.close()

        # Nothing below awaits, so no command can slip in after the queue is drained.
        while not self._commands.empty():
            leftover.append(self._commands.get_nowait())
        for command in leftover:
            if isinstance(command, _Subscribe):
                _fail(command.future)
            else:
                _finish(command.future)
        for command in self._pending_subscribe.values():
            _fail(command.future)
        self._pending_subscribe.clear()
        for future in self._pending_unsubscribe.values():
            _finish(future)
        self._pending_unsubscribe.clear()
        for ref in self._subscriptions.values():
            subscription = ref()
            if subscription is not None:
                subscription._close()
        self._subscriptions.clear()

    async def _dispatch(self, command: Union[_Subscribe, _Unsubscribe]) -> None:
        self._request_id += 1
        request_id = self._request_id
        if isinstance(command, _Subscribe):
            self._pending_subscribe[request_id] = command
            await self._send(request_id, f"{command.operation}Subscribe", command.params)
            return
        ref = self._subscriptions.pop(command.subscription_id, None)
        subscription = ref() if ref is not None else None
        if subscription is not None:
            subscription._close()
        self._pending_unsubscribe[request_id] = command.future
        await self._send(request_id, f"{command.operation}Unsubscribe", [command.subscription_id])

    def _handle_text(self, text: str) -> bool:
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise EnhancedWebsocketError(f"invalid JSON: {exc}", text) from exc
        if not isinstance(payload, dict):
            raise EnhancedWebsocketError("expected a JSON object", text)
        if "id" in payload:
            return self._handle_response(payload, text)
        params = payload.get("params")
        if isinstance(params, dict):
            subscription_id = _as_u64(params.get("subscription"))
            if subscription_id is not None:
                self._handle_notification(payload, params, subscription_id)
        return True

    def _handle_response(self, payload: dict, text: str) -> bool:
        request_id = _as_u64(payload["id"])
        if request_id is None:
            raise EnhancedWebsocketError("invalid `id` field", text)
        reason = _error_reason(payload["error"]) if "error" in payload else None

        if request_id in self._pending_unsubscribe:
            _finish(self._pending_unsubscribe.pop(request_id))
            return True
        command = self._pending_subscribe.pop(request_id, None)
        if command is None:
            _log.error("Unknown request id: %d", request_id)
            return False
        if reason is not None:
            if not command.future.done():
                command.future.set_exception(EnhancedWebsocketError(reason, text))
            return True
        subscription_id = _as_u64(payload.get("result"))
        if subscription_id is None:
            _fail(command.future)
            raise EnhancedWebsocketError("invalid `result` field", text)
        if command.future.done():
            return False
        subscription = Subscription(command.operation, subscription_id, self, command.parse)
        command.future.set_result(subscription)
        self._subscriptions[subscription_id] = weakref.ref(subscription)
        return True

    def _handle_notification(self, payload: dict, params: dict, subscription_id: int) -> None:
        unsubscribe_required = False
        ref = self._subscriptions.get(subscription_id)
        if ref is None:
            unsubscribe_required = True
        elif "result" in params:
            subscription = ref()
            if subscription is None:
                unsubscribe_required = True
            else:
                subscription._deliver(params.pop("result"))
        if unsubscribe_required:
            method = payload.get("method")
            suffix = "Notification"
            if isinstance(method, str) and method.endswith(suffix):
                operation = method[: -len(suffix)]
                self._commands.put_nowait(_Unsubscribe(operation, subscription_id, None))