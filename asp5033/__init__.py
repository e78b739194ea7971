"""Asyncio driver for the ASP5033 airspeed sensor, with a bridge for blocking I2C drivers."""

__version__ = "0.1.0"
__all__ = ["bridge", "cursor", "sensor"]