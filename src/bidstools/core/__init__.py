"""Core domain logic package.

This package contains pure logic for BIDS datasets: filename entities, the
dataset model and file queries. Filesystem scanning lives in
bidstools.infrastructure.
"""
