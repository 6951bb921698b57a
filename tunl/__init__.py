"""WebSocket tunnel server for VMess, VLESS, Trojan and Bepass clients."""

__version__ = "0.1.0"

__all__ = ["__version__"]