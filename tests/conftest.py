# conftest.py - Shared fixtures for the oblivious transfer test suite
import random

import pytest

from ot_protocol.core.group import P256Group


def make_seeded_source(seed):
    """Deterministic random source for reproducible runs (never for real use)"""
    return random.Random(seed).randbytes


@pytest.fixture
def seeded_source():
    return make_seeded_source


@pytest.fixture
def group():
    return P256Group()
