"""Transports that carry SLIP frames. Not needed by the codec itself."""
