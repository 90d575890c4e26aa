"""Tests for batch allocation and collection."""

import numpy as np
import pytest

from qlearn.dqn import Batch, BatchCollector
from qlearn.env.grid_world import GridAgent, GridState, Move
from qlearn.strategy import ExplorationStrategy, FixedIterations, RandomExploration


class AlwaysRight(ExplorationStrategy):
    def pick_action(self, agent):
        action = Move(1, 0)
        agent.take_action(action)
        return action


class TestBatchZeros:
    def test_shapes_and_dtypes(self):
        batch = Batch.zeros(64, 6, 4)
        assert batch.states.shape == (64, 6)
        assert batch.actions.shape == (64, 4)
        assert batch.next_states.shape == (64, 6)
        assert batch.rewards.shape == (64,)
        assert batch.dones.dtype == np.bool_
        assert not batch.dones.any()
        assert not batch.states.any()


class TestBatchCollector:
    def test_full_batch(self):
        collector = BatchCollector(6, 4, batch_size=64)
        agent = GridAgent(GridState(x=0, y=0))
        out = collector.collect(agent, FixedIterations(1_000), RandomExploration(seed=0))
        assert out.length == 64
        assert not out.stopped
        assert not out.batch.dones.any()
        assert out.last_state == agent.current_state()

    def test_rows_record_transition(self):
        collector = BatchCollector(6, 4, batch_size=3)
        agent = GridAgent(GridState(x=0, y=0))
        out = collector.collect(agent, FixedIterations(100), AlwaysRight())
        batch = out.batch
        np.testing.assert_array_equal(batch.states[0], GridState(x=0, y=0).to_array())
        np.testing.assert_array_equal(batch.next_states[0], GridState(x=1, y=0).to_array())
        np.testing.assert_array_equal(batch.states[1], batch.next_states[0])
        np.testing.assert_array_equal(batch.actions[2], [0.0, 1.0, 0.0, 0.0])
        assert batch.rewards[2] == pytest.approx(GridState(x=3, y=0).reward())

    def test_early_stop_leaves_zero_padding(self):
        collector = BatchCollector(6, 4, batch_size=64)
        agent = GridAgent(GridState(x=0, y=0))
        out = collector.collect(agent, FixedIterations(10), RandomExploration(seed=1))
        assert out.stopped
        assert out.length == 11
        assert out.batch.dones[10]
        assert out.batch.dones.sum() == 1
        assert not out.batch.states[11:].any()
        assert not out.batch.next_states[11:].any()
        assert not out.batch.rewards[11:].any()

    def test_wrong_state_size_raises(self):
        collector = BatchCollector(5, 4, batch_size=4)
        agent = GridAgent(GridState(x=0, y=0))
        with pytest.raises(ValueError, match="expected 5"):
            collector.collect(agent, FixedIterations(100), RandomExploration(seed=0))
