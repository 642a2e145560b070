"""Mock ACP market service.

Holds a hardcoded multi-merchant catalog in memory and exposes the
cart, checkout and order endpoints the shopping agent drives.
"""

__version__ = "0.1.0"
