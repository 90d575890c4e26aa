"""Tests for the stateful DQN trainer facade."""

import jax
import jax.numpy as jnp
import numpy as np
import pytest

from qlearn.checkpoint import load_metadata
from qlearn.dqn import DQNAgentTrainer, DQNConfig, QNetwork
from qlearn.env.grid_world import ACTION_SIZE, MOVES, STATE_SIZE, GridAgent, GridState, Move
from qlearn.strategy import FixedIterations, RandomExploration

SAMPLE_STATES = [GridState(x=x, y=y) for x, y in [(0, 0), (3, 17), (10, 9), (20, 20), (12, 5)]]


def _tree_equal(a, b) -> bool:
    return all(
        jnp.array_equal(x, y) for x, y in zip(jax.tree.leaves(a), jax.tree.leaves(b), strict=True)
    )


class TestConstruction:
    def test_properties(self, grid_trainer, small_config):
        assert grid_trainer.state_size == STATE_SIZE
        assert grid_trainer.action_size == ACTION_SIZE
        assert grid_trainer.inner_size == small_config.inner_size
        assert grid_trainer.gamma == pytest.approx(0.9)
        assert grid_trainer.learning_rate == pytest.approx(1e-3)

    def test_default_config(self):
        trainer = DQNAgentTrainer(STATE_SIZE, ACTION_SIZE, Move.from_values)
        assert trainer.gamma == pytest.approx(0.99)
        assert trainer.learning_rate == pytest.approx(1e-3)
        assert trainer.inner_size == 64
        assert trainer.config.batch_norm_axis == 1

    def test_target_starts_as_online(self, grid_trainer):
        state = grid_trainer.dqn_state
        assert _tree_equal(state.params, state.target_params)

    def test_invalid_sizes(self):
        with pytest.raises(ValueError):
            DQNAgentTrainer(0, ACTION_SIZE, Move.from_values)

    def test_invalid_config(self):
        with pytest.raises(ValueError):
            DQNConfig(batch_norm_axis=2)
        with pytest.raises(ValueError):
            DQNConfig(train_steps=0)

    def test_config_frozen(self):
        config = DQNConfig()
        with pytest.raises(AttributeError):
            config.gamma = 0.5  # type: ignore[misc]


class TestQueries:
    def test_expected_value_shape_and_determinism(self, grid_trainer):
        for state in SAMPLE_STATES:
            v1 = grid_trainer.expected_value(state)
            v2 = grid_trainer.expected_value(state)
            assert v1.shape == (ACTION_SIZE,)
            np.testing.assert_array_equal(v1, v2)

    def test_best_action_is_argmax(self, grid_trainer):
        for state in SAMPLE_STATES:
            values = grid_trainer.expected_value(state)
            assert grid_trainer.best_action(state) == MOVES[int(np.argmax(values))]

    def test_expected_value_uses_target_network(self, grid_trainer):
        # Online and target only differ if someone swaps the target; the query must follow it.
        other = QNetwork(STATE_SIZE, ACTION_SIZE, grid_trainer.inner_size, key=jax.random.key(99))
        grid_trainer._state = grid_trainer.dqn_state._replace(target_params=other)
        expected = np.asarray(
            other(jnp.asarray(_row_normalize(SAMPLE_STATES[1].to_array(), grid_trainer.config.norm_eps)))
        )
        np.testing.assert_allclose(
            grid_trainer.expected_value(SAMPLE_STATES[1]), expected, rtol=1e-4, atol=1e-5
        )

    def test_nan_model_reports_zeros(self, grid_trainer):
        import equinox as eqx

        broken = eqx.tree_at(
            lambda net: net.layers[0].weight,
            grid_trainer.export_model(),
            jnp.full((grid_trainer.inner_size, STATE_SIZE), jnp.nan),
        )
        grid_trainer.import_model(broken)
        np.testing.assert_array_equal(grid_trainer.expected_value(SAMPLE_STATES[0]), np.zeros(4))


def _row_normalize(x: np.ndarray, eps: float) -> np.ndarray:
    return (x - x.mean()) / np.sqrt(x.var() + eps)


class TestExportImport:
    def test_round_trip_same_trainer(self, grid_trainer):
        before = [grid_trainer.expected_value(s) for s in SAMPLE_STATES]
        grid_trainer.import_model(grid_trainer.export_model())
        after = [grid_trainer.expected_value(s) for s in SAMPLE_STATES]
        for a, b in zip(before, after, strict=True):
            np.testing.assert_array_equal(a, b)

    def test_export_unaffected_by_later_training(self, grid_trainer):
        exported = grid_trainer.export_model()
        copy = jax.tree.map(jnp.array, exported)
        grid_trainer.train(GridAgent(GridState(x=0, y=0)), FixedIterations(10), RandomExploration(seed=0))
        assert not _tree_equal(grid_trainer.export_model(), exported)
        assert _tree_equal(exported, copy)

    def test_import_into_other_trainer(self, grid_trainer, small_config):
        other = DQNAgentTrainer(
            STATE_SIZE, ACTION_SIZE, Move.from_values, small_config, seed=7, log_interval=0
        )
        other.import_model(grid_trainer.export_model())
        for state in SAMPLE_STATES:
            np.testing.assert_array_equal(
                other.expected_value(state), grid_trainer.expected_value(state)
            )

    def test_online_and_target_identical_after_import(self, grid_trainer, small_config):
        donor = DQNAgentTrainer(
            STATE_SIZE, ACTION_SIZE, Move.from_values, small_config, seed=3, log_interval=0
        )
        grid_trainer.import_model(donor.export_model())
        state = grid_trainer.dqn_state
        assert _tree_equal(state.params, state.target_params)
        obs = jnp.asarray(np.random.default_rng(0).normal(size=(8, STATE_SIZE)), dtype=jnp.float32)
        np.testing.assert_array_equal(state.params(obs), state.target_params(obs))

    def test_import_wrong_size_raises(self, grid_trainer):
        wrong = QNetwork(STATE_SIZE, ACTION_SIZE, 8, key=jax.random.key(0))
        with pytest.raises(ValueError, match="do not match"):
            grid_trainer.import_model(wrong)

    def test_save_and_load(self, grid_trainer, small_config, tmp_path):
        grid_trainer.train_dqn(_grid_batch())
        grid_trainer.save(tmp_path / "model")

        meta = load_metadata(tmp_path / "model")
        assert meta["state_size"] == STATE_SIZE
        assert meta["train_calls"] == 1

        fresh = DQNAgentTrainer(
            STATE_SIZE, ACTION_SIZE, Move.from_values, small_config, seed=11, log_interval=0
        )
        fresh.load(tmp_path / "model")
        for state in SAMPLE_STATES:
            np.testing.assert_array_equal(
                fresh.expected_value(state), grid_trainer.expected_value(state)
            )


def _grid_batch():
    from qlearn.dqn import BatchCollector

    agent = GridAgent(GridState(x=0, y=0))
    return BatchCollector(STATE_SIZE, ACTION_SIZE, 64).collect(
        agent, FixedIterations(1_000), RandomExploration(seed=0)
    ).batch


class TestTrain:
    def test_train_dqn_changes_queries(self, grid_trainer):
        before = grid_trainer.expected_value(SAMPLE_STATES[0])
        metrics = grid_trainer.train_dqn(_grid_batch())
        after = grid_trainer.expected_value(SAMPLE_STATES[0])
        assert not np.array_equal(before, after)
        assert np.isfinite(float(metrics.final_loss))
        assert _tree_equal(grid_trainer.dqn_state.params, grid_trainer.dqn_state.target_params)

    def test_termination_counting(self, grid_trainer):
        # 64 checks while filling batch 1, one after training it; batch 2 stops
        # at the 101st check (row 35), then the post-training check ends the loop.
        records = []
        agent = GridAgent(GridState(x=0, y=0))
        n = grid_trainer.train(
            agent,
            FixedIterations(100),
            RandomExploration(seed=0),
            callback=lambda i, rec: records.append(rec),
        )
        assert n == 2
        assert [r["batch"] for r in records] == [1, 2]
        assert records[0]["transitions"] == 64
        assert records[0]["early_stop"] is False
        assert records[1]["transitions"] == 100
        assert records[1]["early_stop"] is True
        assert all(np.isfinite(r["loss"]) for r in records)

    def test_zero_iterations_still_trains_once(self, grid_trainer):
        agent = GridAgent(GridState(x=0, y=0))
        n = grid_trainer.train(agent, FixedIterations(0), RandomExploration(seed=0))
        assert n == 1
        assert int(grid_trainer.dqn_state.step) == 1

    def test_shapes_preserved_by_training(self, grid_trainer):
        shapes = [x.shape for x in jax.tree.leaves(grid_trainer.export_model())]
        grid_trainer.train(GridAgent(GridState(x=5, y=5)), FixedIterations(130), RandomExploration(seed=2))
        assert [x.shape for x in jax.tree.leaves(grid_trainer.export_model())] == shapes

    def test_progress_logging(self, small_config, caplog):
        trainer = DQNAgentTrainer(
            STATE_SIZE, ACTION_SIZE, Move.from_values, small_config, log_interval=1
        )
        with caplog.at_level("INFO", logger="qlearn.dqn.trainer"):
            trainer.train(GridAgent(GridState(x=0, y=0)), FixedIterations(10), RandomExploration(seed=0))
        assert any("batch 1" in m for m in caplog.messages)


@pytest.mark.slow
class TestGridWorldScenario:
    def test_policy_points_to_target(self):
        config = DQNConfig(gamma=0.9, lr=1e-3, inner_size=64)
        trainer = DQNAgentTrainer(
            STATE_SIZE, ACTION_SIZE, Move.from_values, config, seed=0, log_interval=0
        )
        trainer.train(
            GridAgent(GridState(x=0, y=0)), FixedIterations(10_000), RandomExploration(seed=0)
        )

        cells = [
            GridState(x=x, y=y)
            for x in range(21)
            for y in range(21)
            if GridState(x=x, y=y).distance() >= 3
        ]
        good = sum(
            state.moved(trainer.best_action(state)).distance() < state.distance()
            for state in cells
        )
        assert good / len(cells) >= 0.9
