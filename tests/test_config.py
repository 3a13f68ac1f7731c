import pytest

from gridq.domain.errors import ConfigError
from gridq.domain.types import EpisodeRecord, RLConfig, State, TrainingResult


def test_defaults():
    config = RLConfig()
    assert config.grid_size == 10
    assert config.num_episodes == 1000
    assert config.max_steps_per_episode == 100
    assert config.reward_policy == "shaped"
    assert config.validate() is config


@pytest.mark.parametrize("changes", [
    {"grid_size": 0},
    {"num_episodes": -1},
    {"max_steps_per_episode": 0},
    {"learning_rate": 0.0},
    {"discount_factor": 1.01},
    {"exploration_rate": -0.5},
    {"reward_policy": "dense"},
    {"training_mode": "turbo"},
    {"visual_step_delay": -5},
])
def test_validate_rejects_out_of_range(changes):
    with pytest.raises(ConfigError):
        RLConfig(**changes).validate()


def test_replace_returns_validated_copy():
    config = RLConfig()
    changed = config.replace(grid_size=4, reward_policy="sparse")
    assert changed.grid_size == 4
    assert changed.reward_policy == "sparse"
    assert config.grid_size == 10

    with pytest.raises(ConfigError):
        config.replace(learning_rate=2.0)


def test_state_index_round_trip():
    for index in range(25):
        assert State.from_index(index, 5).index(5) == index
    assert State(3, 2).index(5) == 13


def test_training_result_statistics():
    result = TrainingResult([
        EpisodeRecord(0, 100, -100.0, False),
        EpisodeRecord(1, 18, -7.0, True),
        EpisodeRecord(2, 18, -7.0, True),
        EpisodeRecord(3, 20, -9.0, True),
    ])
    assert result.total_episodes == 4
    assert result.successful_episodes == 3
    assert result.success_rate == 0.75
    assert result.average_reward == pytest.approx(-30.75)
    assert result.average_steps == pytest.approx(39.0)
    assert result.rewards == [-100.0, -7.0, -7.0, -9.0]


def test_empty_training_result():
    result = TrainingResult()
    assert result.success_rate == 0.0
    assert result.average_reward == 0.0
    assert result.average_steps == 0.0


def test_episode_record_is_immutable():
    record = EpisodeRecord(0, 5, -5.0, False)
    with pytest.raises(AttributeError):
        record.steps = 6
