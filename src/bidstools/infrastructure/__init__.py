"""
Infrastructure layer package.

This package contains modules for interacting with the outside world:
- BIDS dataset discovery
- JSON and TSV loading
- Path resolution
- Logging configuration
"""
