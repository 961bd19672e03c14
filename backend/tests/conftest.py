"""Pytest configuration and fixtures."""

import logging

import pytest


@pytest.fixture
def event_loop_policy():
    """Use the default event loop policy for all async tests."""
    import asyncio

    return asyncio.DefaultEventLoopPolicy()


@pytest.fixture(autouse=True)
def _debug_logging(caplog):
    """Capture papertrade logs at DEBUG so failures show the feed's decisions."""
    caplog.set_level(logging.DEBUG, logger="papertrade")
