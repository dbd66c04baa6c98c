# tests/conftest.py
import pytest

from generator.bounds import CONFIG_ENV_VAR, GeneratorBounds


@pytest.fixture(autouse=True)
def _isolate_generator_config(monkeypatch):
    """Tests never pick up a generator config from the developer's environment."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


@pytest.fixture
def bounds() -> GeneratorBounds:
    """Generous limits for generator tests, every rule weighted equally."""
    return GeneratorBounds(max_attempts=200)
