"""Asynchronous I2C bus backed by a blocking driver running on a worker thread."""

from __future__ import annotations

import asyncio
import concurrent.futures
import functools
import queue
import threading
from dataclasses import dataclass
from typing import Any, Callable, Protocol, Sequence, Union

_STOP = object()


class _SyncI2c(Protocol):
    def read(self, address: int, length: int) -> bytes: ...

    def write(self, address: int, data: bytes) -> None: ...

    def write_read(self, address: int, data: bytes, length: int) -> bytes: ...

    def transaction(
        self, address: int, operations: Sequence["ReadOp | WriteOp"]
    ) -> Sequence[bytes]: ...


class BridgeError(Exception):
    """A request relayed through the bridge failed."""


class InternalBridgeError(BridgeError):
    """The bridge could not relay the request or got a malformed reply."""


class BridgeBusError(BridgeError):
    """The underlying blocking driver raised; the original error is the cause."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"Bus error: {cause!r}")
        self.cause = cause


@dataclass(frozen=True)
class ReadOp:
    """Read ``length`` bytes as one step of a transaction."""

    length: int


@dataclass(frozen=True)
class WriteOp:
    """Write ``data`` as one step of a transaction."""

    data: bytes


Operation = Union[ReadOp, WriteOp]


class AsyncI2cBridge:
    """Exposes a blocking I2C driver as an asynchronous bus.

    The driver must offer ``read(address, length)``, ``write(address, data)``,
    ``write_read(address, data, length)`` and, for transactions,
    ``transaction(address, operations)`` returning the bytes of each read
    operation in order. All driver calls happen on a single worker thread.
    """

    def __init__(self, driver: _SyncI2c) -> None:
        self._driver = driver
        self._requests: queue.SimpleQueue[Any] = queue.SimpleQueue()
        self._lock = threading.Lock()
        self._closed = False
        self._thread = threading.Thread(
            target=self._run, name="i2c-bridge", daemon=True
        )
        self._thread.start()

    def __enter__(self) -> "AsyncI2cBridge":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    def shutdown(self) -> None:
        """Stop the worker thread after pending requests finish. Idempotent."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._requests.put(_STOP)
        if threading.current_thread() is not self._thread:
            self._thread.join()

    async def read(self, address: int, length: int) -> bytes:
        """Read ``length`` bytes from the device at ``address``."""
        data = await self._relay(functools.partial(self._driver.read, address, length))
        return self._checked(data, length)

    async def write(self, address: int, data: bytes) -> None:
        """Write ``data`` to the device at ``address``."""
        await self._relay(functools.partial(self._driver.write, address, bytes(data)))

    async def write_read(self, address: int, data: bytes, length: int) -> bytes:
        """Write ``data`` then read ``length`` bytes in one transaction."""
        reply = await self._relay(
            functools.partial(self._driver.write_read, address, bytes(data), length)
        )
        return self._checked(reply, length)

    async def transaction(
        self, address: int, operations: Sequence[Operation]
    ) -> list[bytes]:
        """Run a sequence of operations; return the bytes of each read, in order."""
        ops = list(operations)
        for op in ops:
            if not isinstance(op, (ReadOp, WriteOp)):
                raise TypeError(f"unsupported transaction operation: {op!r}")
        reads = await self._relay(
            functools.partial(self._driver.transaction, address, ops)
        )
        reads = list(reads)
        read_ops = [op for op in ops if isinstance(op, ReadOp)]
        if len(reads) != len(read_ops):
            raise InternalBridgeError(
                f"expected {len(read_ops)} read buffers, driver returned {len(reads)}"
            )
        return [self._checked(buf, op.length) for buf, op in zip(reads, read_ops)]

    async def _relay(self, call: Callable[[], Any]) -> Any:
        future: concurrent.futures.Future[Any] = concurrent.futures.Future()
        with self._lock:
            if self._closed:
                raise InternalBridgeError("bridge has been shut down")
            self._requests.put((call, future))
        try:
            return await asyncio.wrap_future(future)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            raise BridgeBusError(exc) from exc

    @staticmethod
    def _checked(data: Any, length: int) -> bytes:
        buf = bytes(data)
        if len(buf) != length:
            raise InternalBridgeError(
                f"expected {length} bytes, driver returned {len(buf)}"
            )
        return buf

    def _run(self) -> None:
        while True:
            item = self._requests.get()
            if item is _STOP:
                return
            call, future = item
            if not future.set_running_or_notify_cancel():
                continue
            try:
                result = call()
            except Exception as exc:
                future.set_exception(exc)
            else:
                future.set_result(result)