import pytest
from pydantic import ValidationError

from ringside_core import DEFAULT_CONFIG, EngineConfig


def test_defaults():
    assert DEFAULT_CONFIG.min_pools == 1
    assert DEFAULT_CONFIG.max_pools == 10
    assert DEFAULT_CONFIG.diversity_seed_size == 3
    assert DEFAULT_CONFIG.strict_sub_rings is False


def test_clamp_pools():
    config = EngineConfig(min_pools=2, max_pools=4)
    assert config.clamp_pools(None) == 2
    assert config.clamp_pools(0) == 2
    assert config.clamp_pools(3) == 3
    assert config.clamp_pools(9) == 4


def test_min_pools_cannot_exceed_max_pools():
    with pytest.raises(ValidationError):
        EngineConfig(min_pools=5, max_pools=2)


def test_config_is_immutable():
    with pytest.raises(ValidationError):
        DEFAULT_CONFIG.max_pools = 3
