"""Driver for the QioTek ASP5033 differential-pressure airspeed sensor over I2C."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from asp5033.cursor import SimpleCursor

DEFAULT_ADDRESS = 0x6D
ALTERNATE_ADDRESS = 0x6C

_REG_ID_GET = 0x01
_REG_ID_SET = 0xA4
_WHOAMI_DEFAULT_ID = 0x00
_WHOAMI_RECHECK_ID = 0x66

_REG_CMD = 0x30
_CMD_MEASURE = 0x0A
_CMD_MASK_SENSOR_READY = 0x08

_REG_MEASUREMENTS = 0x06

_PRESSURE_SCALE = 1.0 / 128.0
_TEMP_SCALE = 1.0 / 256.0


class AsyncI2c(Protocol):
    """An asynchronous I2C bus; failures are raised as exceptions."""

    async def read(self, address: int, length: int) -> bytes:
        """Read ``length`` bytes from the device at ``address``."""

    async def write(self, address: int, data: bytes) -> None:
        """Write ``data`` to the device at ``address``."""

    async def write_read(self, address: int, data: bytes, length: int) -> bytes:
        """Write ``data``, then read ``length`` bytes, in one transaction."""


class SensorIdCheckError(Exception):
    """The sensor identity check failed."""


class UnexpectedIdError(SensorIdCheckError):
    """The sensor answered with an identifier it should not have."""

    def __init__(self, got: int, failed_operation: int) -> None:
        super().__init__(f"Unexpected id: got={got}, failed_operation={failed_operation}")
        self.got = got
        self.failed_operation = failed_operation


class BusError(SensorIdCheckError):
    """The bus failed during the identity check; the bus error is the cause."""


@dataclass(frozen=True)
class CombinedMeasurement:
    """Differential pressure in pascals and temperature in degrees Celsius."""

    pressure: float
    temperature: float


class Asp5033:
    """ASP5033 sensor attached to an asynchronous I2C bus."""

    def __init__(self, i2c: AsyncI2c, address: int = DEFAULT_ADDRESS) -> None:
        self.i2c = i2c
        self.address = address

    async def perform_sensor_id_check(self) -> None:
        """Confirm the device identifies as an ASP5033.

        Raises UnexpectedIdError on a wrong identifier and BusError when the
        bus fails.
        """
        try:
            ident = await self._write_read_one(bytes([_REG_ID_SET]))
            if ident not in (_WHOAMI_DEFAULT_ID, _WHOAMI_RECHECK_ID):
                raise UnexpectedIdError(ident, _REG_ID_SET)

            await self.i2c.write(self.address, bytes([_REG_ID_SET, _WHOAMI_RECHECK_ID]))

            ident = await self._write_read_one(bytes([_REG_ID_GET]))
            if ident != _WHOAMI_RECHECK_ID:
                raise UnexpectedIdError(ident, _REG_ID_GET)
        except SensorIdCheckError:
            raise
        except Exception as exc:
            raise BusError(f"Bus error: {exc!r}") from exc

    async def request_measurement(self) -> None:
        """Start a one-off measurement.

        Call this one sampling interval before read_measurement.
        """
        await self.i2c.write(self.address, bytes([_REG_CMD, _CMD_MEASURE]))

    async def is_measurement_ready(self) -> bool:
        """Whether the previously requested measurement cycle has completed."""
        status = await self._write_read_one(bytes([_REG_CMD]))
        return bool(status & _CMD_MASK_SENSOR_READY)

    async def read_measurement(self) -> CombinedMeasurement:
        """Read the values produced by a prior measurement cycle."""
        raw = await self.i2c.write_read(self.address, bytes([_REG_MEASUREMENTS]), 5)
        cursor = SimpleCursor(raw)
        pressure = cursor.read_i24() * _PRESSURE_SCALE
        temperature = cursor.read_i16() * _TEMP_SCALE
        return CombinedMeasurement(pressure=pressure, temperature=temperature)

    async def _write_read_one(self, data: bytes) -> int:
        reply = await self.i2c.write_read(self.address, data, 1)
        return reply[0]