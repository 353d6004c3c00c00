"""Shared pytest fixtures for cdeclgen tests."""

import pytest

from cdeclgen.config import (
    Config,
    Language,
)


@pytest.fixture
def c_config() -> Config:
    """Plain C configuration with default settings."""
    return Config(language=Language.C)


@pytest.fixture(
    params=[
        pytest.param(Language.C, id="c"),
        pytest.param(Language.CXX, id="cxx"),
        pytest.param(Language.CYTHON, id="cython"),
    ]
)
def language(request: pytest.FixtureRequest) -> Language:
    """Parameterized fixture providing each output language."""
    return request.param
