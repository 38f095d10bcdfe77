"""Flask HTTP adapters."""
