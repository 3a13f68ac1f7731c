import numpy as np
import pytest

from gridq.domain.environment import GridEnvironment
from gridq.domain.errors import ConfigError
from gridq.domain.qlearning import QLearningAgent
from gridq.domain.rewards import ShapedReward, SparseReward
from gridq.domain.runner import EpisodeRunner
from gridq.domain.types import EpisodeRecord, State
from gridq.utils.rng import SeededRNG


def make_runner(grid_size=2, max_steps=100, exploration_rate=0.0, reward_policy=None, seed=0, **hooks):
    env = GridEnvironment(grid_size=grid_size, reward_policy=reward_policy or SparseReward())
    agent = QLearningAgent(env.num_states, env.num_actions, learning_rate=0.5, discount_factor=0.9,
                           exploration_rate=exploration_rate, rng=SeededRNG(seed))
    return EpisodeRunner(agent, env, max_steps=max_steps, **hooks)


def test_converges_to_shortest_path_on_two_by_two_grid():
    runner = make_runner(grid_size=2)
    result = runner.run(50)

    path = runner.greedy_path()
    assert path[0] == State(0, 0)
    assert path[-1] == State(1, 1)
    assert len(path) - 1 == 2
    assert result.episodes[-1].steps == 2
    assert result.episodes[-1].reached_goal


def test_step_budget_ends_episode():
    records = []
    runner = make_runner(grid_size=10, max_steps=5,
                         on_episode_complete=lambda *args: records.append(args))
    record = runner.run_episode(0)

    assert record.steps == 5
    assert not record.reached_goal
    assert len(records) == 1
    assert records[0][0] == 0
    assert records[0][1] == 5
    assert records[0][2] == pytest.approx(record.total_reward)


def test_sparse_total_reward_counts_each_step():
    runner = make_runner(grid_size=10, max_steps=5)
    record = runner.run_episode(0)
    assert record.total_reward == pytest.approx(-5.0)


def test_state_hook_called_once_per_step_with_current_state():
    seen = []
    runner = make_runner(grid_size=10, max_steps=7, on_state_update=seen.append)
    record = runner.run_episode(0)

    assert len(seen) == record.steps == 7
    assert seen[0] == State(0, 0)
    # each reported state is one move (or a wall bump) from the previous one
    for a, b in zip(seen, seen[1:]):
        assert abs(a.x - b.x) + abs(a.y - b.y) <= 1


def test_run_records_every_episode_in_order():
    hook_calls = []
    runner = make_runner(grid_size=3, exploration_rate=0.2,
                         on_episode_complete=lambda i, steps, total: hook_calls.append(i))
    result = runner.run(20)

    assert result.total_episodes == 20
    assert [ep.episode for ep in result.episodes] == list(range(20))
    assert hook_calls == list(range(20))
    assert all(isinstance(ep, EpisodeRecord) for ep in result.episodes)


def test_episode_stops_early_at_goal():
    runner = make_runner(grid_size=2, max_steps=100)
    result = runner.run(50)
    assert all(ep.steps < 100 for ep in result.episodes if ep.reached_goal)
    assert result.success_rate == 1.0


def test_each_episode_restarts_from_start():
    seen = []
    runner = make_runner(grid_size=3, max_steps=3, exploration_rate=1.0, on_state_update=seen.append)
    runner.run(4)
    starts = seen[::3]
    assert starts == [State(0, 0)] * 4


def test_step_wise_api_matches_run_episode():
    a = make_runner(grid_size=4, exploration_rate=0.3, seed=11)
    b = make_runner(grid_size=4, exploration_rate=0.3, seed=11)

    expected = a.run_episode(0)

    b.start_episode(0)
    assert b.in_episode
    assert b.current_state == State(0, 0)
    record = None
    while record is None:
        record = b.step()
    assert not b.in_episode
    assert record == expected
    np.testing.assert_array_equal(a.agent.q_table, b.agent.q_table)


def test_step_without_episode_raises():
    runner = make_runner()
    with pytest.raises(RuntimeError):
        runner.step()


def test_hook_failure_aborts_episode_but_keeps_updates():
    calls = []

    def failing_hook(state):
        calls.append(state)
        if len(calls) == 3:
            raise RuntimeError("display closed")

    runner = make_runner(grid_size=10, max_steps=20, on_state_update=failing_hook)
    with pytest.raises(RuntimeError, match="display closed"):
        runner.run_episode(0)

    assert not runner.in_episode
    # two steps were learned before the hook failed
    assert np.count_nonzero(runner.agent.q_table) == 2


def test_shaped_and_sparse_share_the_loop():
    shaped = make_runner(grid_size=10, max_steps=5, reward_policy=ShapedReward())
    record = shaped.run_episode(0)
    assert record.steps == 5
    assert abs(record.total_reward) <= 5 * 0.01 + 1e-9


def test_greedy_path_respects_budget_on_untrained_agent():
    runner = make_runner(grid_size=5, max_steps=10)
    path = runner.greedy_path()
    # untrained agent picks UP forever and bumps the top wall
    assert len(path) == 11
    assert set(path) == {State(0, 0)}


def test_greedy_path_does_not_learn():
    runner = make_runner(grid_size=3)
    runner.greedy_path(max_steps=5)
    assert np.all(runner.agent.q_table == 0.0)


def test_one_cell_grid_ends_after_one_step():
    runner = make_runner(grid_size=1)
    record = runner.run_episode(0)
    assert record.steps == 1
    assert record.reached_goal
    assert record.total_reward == 10.0
    assert runner.greedy_path() == [State(0, 0)]


@pytest.mark.parametrize("max_steps", [0, -3])
def test_runner_rejects_empty_step_budget(max_steps):
    with pytest.raises(ConfigError, match="max_steps"):
        make_runner(max_steps=max_steps)
