# asp5033

An asyncio driver for the ASP5033 differential-pressure (airspeed) sensor. The
driver talks to the sensor over I2C.

The driver is not tied to any particular I2C backend. It accepts any object
that follows the `asp5033.sensor.AsyncI2c` protocol:

- `await read(address, length) -> bytes`
- `await write(address, data) -> None`
- `await write_read(address, data, length) -> bytes`

If your I2C driver is blocking, wrap it in `asp5033.bridge.AsyncI2cBridge`.
The bridge runs the blocking calls on a single worker thread.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Usage

```python
import asyncio

from asp5033.sensor import Asp5033, DEFAULT_ADDRESS


async def run(i2c):
    sensor = Asp5033(i2c, DEFAULT_ADDRESS)
    await sensor.perform_sensor_id_check()

    while True:
        await sensor.request_measurement()
        await asyncio.sleep(0.1)
        measurement = await sensor.read_measurement()
        print(
            f"diff pressure={measurement.pressure:.2f} Pa, "
            f"temperature={measurement.temperature:.2f} C"
        )
        await asyncio.sleep(0.9)
```

`Asp5033(i2c, address=DEFAULT_ADDRESS)` takes the sensor's bus address. The
two addresses are `DEFAULT_ADDRESS` (`0x6d`) and `ALTERNATE_ADDRESS` (`0x6c`).

`perform_sensor_id_check()` reads the identity register. It then writes the
recheck id and reads the id back to confirm it.

Request a measurement one sampling interval before you read it. To find out
whether the cycle has finished, call `await sensor.is_measurement_ready()`. In
practice, waiting between the request and the read is enough.

`read_measurement()` reads five bytes starting at register `0x06` and returns
a frozen `CombinedMeasurement` with two fields:

- `pressure`: differential pressure in pascals, from 24 bits scaled by 1/128.
- `temperature`: temperature in degrees Celsius, from a signed 16-bit value
  scaled by 1/256.

## Errors

`perform_sensor_id_check()` raises a subclass of `SensorIdCheckError`:

- `UnexpectedIdError`: the sensor answered with an unexpected id. Its `got`
  attribute holds the id that was returned. Its `failed_operation` attribute
  holds the register being checked (`0xa4` or `0x01`).
- `BusError`: the I2C bus raised during the check. The original exception is
  chained as its cause.

`request_measurement()`, `is_measurement_ready()` and `read_measurement()` do
not wrap bus errors. Whatever the bus raises reaches the caller unchanged.

## Bridging a blocking driver

```python
from asp5033.bridge import AsyncI2cBridge, ReadOp, WriteOp
from asp5033.sensor import Asp5033, DEFAULT_ADDRESS


async def run(blocking_i2c):
    with AsyncI2cBridge(blocking_i2c) as bus:
        sensor = Asp5033(bus, DEFAULT_ADDRESS)
        await sensor.perform_sensor_id_check()
        # Combined transfers are also available:
        reads = await bus.transaction(DEFAULT_ADDRESS, [WriteOp(b"\x06"), ReadOp(5)])
```

The blocking driver must provide these methods:

- `read(address, length)`
- `write(address, data)`
- `write_read(address, data, length)`
- `transaction(address, operations)`, which must return the bytes of each
  `ReadOp`, in order

`transaction()` returns a list with one `bytes` value for each `ReadOp`. It
raises `TypeError` if an operation is neither a `ReadOp` nor a `WriteOp`.

Leaving the `with` block calls `shutdown()`. The worker thread finishes any
pending requests and then stops. Calling `shutdown()` more than once is safe.

The bridge's errors are subclasses of `BridgeError`:

- `BridgeBusError`: the blocking driver raised. The original exception is
  stored in `cause` and is also chained.
- `InternalBridgeError`: one of these happened:
  - a request was made after the bridge was shut down;
  - the driver returned the wrong number of bytes;
  - the driver returned the wrong number of read buffers.

## What this package does not do

The package contains no concrete I2C backend, such as a USB-to-I2C adapter
driver. You must supply one. It also installs no command-line program: you
write the measurement loop yourself, as in the example above.