"""Shared pytest fixtures for responder tests."""

from __future__ import annotations

import pytest

from core.types import BotIdentity
from responders.registry import ResponderModule


@pytest.fixture()
def zen() -> BotIdentity:
    return BotIdentity("zen")


@pytest.fixture()
def builder() -> ResponderModule:
    return ResponderModule("tests.responders")
