import threading

import pytest

from asp5033.bridge import (
    AsyncI2cBridge,
    BridgeBusError,
    BridgeError,
    InternalBridgeError,
    ReadOp,
    WriteOp,
)
from asp5033.sensor import DEFAULT_ADDRESS, Asp5033

TEST_ADDRESS = 0x12


class FakeDriver:
    """Blocking driver that checks calls against a list of expectations."""

    def __init__(self, expected):
        self.expected = list(expected)
        self.threads = set()

    def _next(self, kind, address, data=None):
        self.threads.add(threading.get_ident())
        if not self.expected:
            raise RuntimeError(f"unexpected {kind}")
        exp = self.expected.pop(0)
        if exp[0] != kind or exp[1] != address or (data is not None and exp[2] != data):
            raise RuntimeError(f"mismatch: expected {exp}, got {kind} {address} {data}")
        return exp

    def read(self, address, length):
        return self._next("read", address)[2]

    def write(self, address, data):
        self._next("write", address, bytes(data))

    def write_read(self, address, data, length):
        return self._next("write_read", address, bytes(data))[3]

    def transaction(self, address, operations):
        return self._next("transaction", address, list(operations))[3]

    def done(self):
        return not self.expected


@pytest.mark.asyncio
async def test_with_mock():
    write1, read1 = bytes([1, 2, 3]), bytes([4, 5, 6])
    write2 = bytes([7])
    write3, read2 = bytes([8, 9]), bytes([10, 11, 12, 13, 14, 15])
    read3 = bytes([16])
    driver = FakeDriver(
        [
            ("write_read", TEST_ADDRESS, write1, read1),
            ("write", TEST_ADDRESS, write2),
            ("write_read", TEST_ADDRESS, write3, read2),
            ("read", TEST_ADDRESS, read3),
        ]
    )
    bridge = AsyncI2cBridge(driver)
    assert await bridge.write_read(TEST_ADDRESS, write1, len(read1)) == read1
    assert await bridge.write(TEST_ADDRESS, write2) is None
    assert await bridge.write_read(TEST_ADDRESS, write3, len(read2)) == read2
    assert await bridge.read(TEST_ADDRESS, len(read3)) == read3
    assert driver.done()
    bridge.shutdown()


@pytest.mark.asyncio
async def test_calls_run_on_worker_thread():
    driver = FakeDriver([("read", TEST_ADDRESS, b"\x01")])
    with AsyncI2cBridge(driver) as bridge:
        assert await bridge.read(TEST_ADDRESS, 1) == b"\x01"
    assert driver.threads
    assert threading.get_ident() not in driver.threads


@pytest.mark.asyncio
async def test_transaction_returns_reads_in_order():
    ops = [WriteOp(b"\x01"), ReadOp(2), WriteOp(b"\x02"), ReadOp(1)]
    driver = FakeDriver([("transaction", TEST_ADDRESS, ops, [b"\xaa\xbb", b"\xcc"])])
    with AsyncI2cBridge(driver) as bridge:
        result = await bridge.transaction(TEST_ADDRESS, ops)
    assert result == [b"\xaa\xbb", b"\xcc"]


@pytest.mark.asyncio
async def test_transaction_rejects_unknown_operation():
    with AsyncI2cBridge(FakeDriver([])) as bridge:
        with pytest.raises(TypeError):
            await bridge.transaction(TEST_ADDRESS, ["bogus"])


@pytest.mark.asyncio
async def test_transaction_wrong_buffer_count_is_internal_error():
    ops = [ReadOp(1), ReadOp(1)]
    driver = FakeDriver([("transaction", TEST_ADDRESS, ops, [b"\x00"])])
    with AsyncI2cBridge(driver) as bridge:
        with pytest.raises(InternalBridgeError):
            await bridge.transaction(TEST_ADDRESS, ops)


@pytest.mark.asyncio
async def test_driver_error_becomes_bus_error():
    driver = FakeDriver([])
    with AsyncI2cBridge(driver) as bridge:
        with pytest.raises(BridgeBusError) as info:
            await bridge.write(TEST_ADDRESS, b"\x01")
    assert isinstance(info.value.cause, RuntimeError)
    assert info.value.__cause__ is info.value.cause


@pytest.mark.asyncio
async def test_short_read_is_internal_error():
    driver = FakeDriver([("read", TEST_ADDRESS, b"\x01")])
    with AsyncI2cBridge(driver) as bridge:
        with pytest.raises(InternalBridgeError):
            await bridge.read(TEST_ADDRESS, 3)


@pytest.mark.asyncio
async def test_request_after_shutdown_fails():
    bridge = AsyncI2cBridge(FakeDriver([]))
    bridge.shutdown()
    bridge.shutdown()
    with pytest.raises(InternalBridgeError):
        await bridge.read(TEST_ADDRESS, 1)
    assert issubclass(InternalBridgeError, BridgeError)


@pytest.mark.asyncio
async def test_sensor_over_bridge():
    driver = FakeDriver(
        [
            ("write_read", DEFAULT_ADDRESS, bytes([0xA4]), bytes([0x00])),
            ("write", DEFAULT_ADDRESS, bytes([0xA4, 0x66])),
            ("write_read", DEFAULT_ADDRESS, bytes([0x01]), bytes([0x66])),
            ("write", DEFAULT_ADDRESS, bytes([0x30, 0x0A])),
            ("write_read", DEFAULT_ADDRESS, bytes([0x06]), bytes([0x00, 0x01, 0x00, 0x01, 0x00])),
        ]
    )
    with AsyncI2cBridge(driver) as bridge:
        sensor = Asp5033(bridge)
        await sensor.perform_sensor_id_check()
        await sensor.request_measurement()
        measurement = await sensor.read_measurement()
    assert measurement.pressure == 2.0
    assert measurement.temperature == 1.0
    assert driver.done()