"""ArtsyHub backend: Artsy catalog proxy, accounts and favorite artists."""

__version__ = "0.1.0"
