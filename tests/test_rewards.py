import itertools

import numpy as np
import pytest

from gridq.domain.environment import GridEnvironment
from gridq.domain.errors import ConfigError
from gridq.domain.rewards import ShapedReward, SparseReward, make_reward_policy, manhattan_distance
from gridq.domain.types import RLConfig, State

SIZE = 4
GOAL = State(SIZE - 1, SIZE - 1)
STATES = [State(x, y) for y in range(SIZE) for x in range(SIZE)]


def test_manhattan_distance():
    assert manhattan_distance(State(0, 0), State(3, 3)) == 6
    assert manhattan_distance(State(2, 1), State(1, 3)) == 3
    assert manhattan_distance(State(1, 1), State(1, 1)) == 0


def test_sparse_reward_for_all_pairs():
    policy = SparseReward(goal_reward=10.0, step_penalty=-1.0)
    for s, s_next in itertools.product(STATES, STATES):
        expected = 10.0 if s_next == GOAL else -1.0
        assert policy(s, s_next, GOAL) == expected


def test_sparse_reward_ignores_distance():
    policy = SparseReward()
    assert policy(State(0, 0), State(1, 0), GOAL) == policy(State(1, 0), State(0, 0), GOAL)


def test_shaped_reward_sign_follows_progress_for_all_pairs():
    policy = ShapedReward(goal_reward=10.0, shaping=0.01)
    for s, s_next in itertools.product(STATES, STATES):
        reward = policy(s, s_next, GOAL)
        if s_next == GOAL:
            assert reward == 10.0
            continue
        progress = manhattan_distance(s, GOAL) - manhattan_distance(s_next, GOAL)
        if progress > 0:
            assert reward == pytest.approx(0.01)
        else:
            # no strict decrease, including staying put
            assert reward == pytest.approx(-0.01)


def test_shaped_reward_penalises_wall_bump():
    env = GridEnvironment(grid_size=SIZE, reward_policy=ShapedReward())
    assert env.reward(State(0, 0), State(0, 0)) < 0


def test_shaped_magnitudes_are_symmetric():
    policy = ShapedReward(shaping=0.25)
    closer = policy(State(0, 0), State(1, 0), GOAL)
    farther = policy(State(1, 0), State(0, 0), GOAL)
    assert closer == -farther == 0.25


def test_make_reward_policy_selects_by_name():
    sparse = make_reward_policy(RLConfig(reward_policy="sparse", goal_reward=5.0, step_penalty=-2.0))
    shaped = make_reward_policy(RLConfig(reward_policy="shaped", shaping_reward=0.5))
    assert sparse == SparseReward(goal_reward=5.0, step_penalty=-2.0)
    assert shaped == ShapedReward(goal_reward=10.0, shaping=0.5)


def test_make_reward_policy_rejects_unknown_name():
    with pytest.raises(ConfigError):
        make_reward_policy(RLConfig(reward_policy="dense"))


def test_environment_from_config_uses_selected_policy():
    env = GridEnvironment.from_config(RLConfig(grid_size=3, reward_policy="sparse"))
    assert isinstance(env.reward_policy, SparseReward)
    assert env.reward(State(0, 0), State(1, 0)) == -1.0
    assert np.isclose(env.reward(State(2, 1), State(2, 2)), 10.0)
