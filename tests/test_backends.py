import numpy as np
import pytest

from asianmc.backends import (
    ProcessBackend,
    SequentialBackend,
    ThreadBackend,
    chunk_size_for,
    make_blocks,
    prepare_blocks,
    spawn_trial_states,
    worker_run_chunk,
)


class TestMakeBlocks:
    """Test block creation for parallel processing"""

    def test_make_blocks_exact_division(self):
        """Test blocks with exact division"""
        blocks = make_blocks(10000, block_size=1000)
        assert len(blocks) == 10
        assert blocks[0] == (0, 1000)
        assert blocks[-1] == (9000, 10000)

    def test_make_blocks_with_remainder(self):
        """Test blocks with remainder"""
        blocks = make_blocks(10500, block_size=1000)
        assert len(blocks) == 11
        assert blocks[-1] == (10000, 10500)

    def test_make_blocks_small_n(self):
        """Test blocks smaller than block_size"""
        assert make_blocks(500, block_size=1000) == [(0, 500)]

    def test_make_blocks_zero_block_size(self):
        """Test a zero block size falls back to 1"""
        assert make_blocks(3, block_size=0) == [(0, 1), (1, 2), (2, 3)]

    def test_make_blocks_coverage(self):
        """Test all elements are covered exactly once"""
        n = 12345
        blocks = make_blocks(n, block_size=1000)
        assert sum(j - i for i, j in blocks) == n
        assert all(a[1] == b[0] for a, b in zip(blocks, blocks[1:]))


class TestChunkSize:
    """Test the default chunk length heuristic"""

    @pytest.mark.parametrize(
        "n, workers, expected",
        [
            (100_000, 4, 2_500),
            (100_000, 8, 1_250),
            (39, 4, 1),
            (1, 1, 1),
            (1_000, 0, 1),
            (1_000, -3, 1),
        ],
    )
    def test_chunk_size_for(self, n, workers, expected):
        """Test max(1, n // (10 * workers)) with a fallback of 1"""
        assert chunk_size_for(n, workers) == expected

    def test_custom_chunks_per_worker(self):
        """Test the divisor is configurable"""
        assert chunk_size_for(1_000, 2, chunks_per_worker=5) == 100


class TestTrialStates:
    """Test the per-trial fan-out"""

    def test_spawn_trial_states_count_and_uniqueness(self, root_state):
        """Test one distinct state per trial"""
        states = spawn_trial_states(root_state, 100)
        assert len(states) == 100
        assert len(set(states)) == 100

    def test_prepare_blocks(self, root_state):
        """Test blocks cover every trial and states are independent of chunking"""
        blocks_a, states_a = prepare_blocks(97, root_state, n_workers=2)
        blocks_b, states_b = prepare_blocks(97, root_state, n_workers=2, chunk_size=13)
        assert blocks_a[-1][1] == blocks_b[-1][1] == 97
        assert blocks_b[0] == (0, 13)
        assert states_a == states_b

    def test_worker_run_chunk(self, kernel, root_state):
        """Test the worker evaluates each state in order"""
        states = spawn_trial_states(root_state, 5)
        out = worker_run_chunk(kernel, states)
        assert isinstance(out, np.ndarray)
        np.testing.assert_array_equal(out, [kernel.evaluate(s) for s in states])


class TestSequentialBackend:
    """Test the single-stream backend"""

    def test_threads_one_state(self, kernel, root_state):
        """Test each trial starts where the previous one ended"""
        payoffs = SequentialBackend().run(kernel, 4, root_state, None)
        state = root_state
        expected = []
        for _ in range(4):
            payoff, state = kernel.step(state)
            expected.append(payoff)
        np.testing.assert_array_equal(payoffs, expected)

    def test_progress_callback(self, kernel, root_state):
        """Test progress ends at (n, n)"""
        calls = []
        SequentialBackend().run(kernel, 250, root_state, lambda done, total: calls.append((done, total)))
        assert calls[-1] == (250, 250)
        assert [c[0] for c in calls] == sorted(c[0] for c in calls)

    def test_rejects_non_positive_trials(self, kernel, root_state):
        """Test n_trials must be positive"""
        with pytest.raises(ValueError):
            SequentialBackend().run(kernel, 0, root_state, None)


class TestThreadBackend:
    """Test the thread pool backend"""

    def test_payoffs_follow_trial_states(self, kernel, root_state):
        """Test trial i is driven by the i-th spawned state"""
        payoffs = ThreadBackend(n_workers=3).run(kernel, 60, root_state, None)
        expected = [kernel.evaluate(s) for s in spawn_trial_states(root_state, 60)]
        np.testing.assert_array_equal(payoffs, expected)

    @pytest.mark.parametrize("workers, chunk_size", [(1, None), (2, 1), (4, 7), (3, 1000), (0, None)])
    def test_partition_independence(self, kernel, root_state, workers, chunk_size):
        """Test chunking and worker count never change the payoff multiset"""
        reference = ThreadBackend(n_workers=2, chunk_size=5).run(kernel, 150, root_state, None)
        payoffs = ThreadBackend(n_workers=workers, chunk_size=chunk_size).run(kernel, 150, root_state, None)
        np.testing.assert_array_equal(np.sort(payoffs), np.sort(reference))
        np.testing.assert_array_equal(payoffs, reference)

    def test_progress_callback(self, kernel, root_state):
        """Test progress reaches the trial count"""
        calls = []
        ThreadBackend(n_workers=2, chunk_size=10).run(
            kernel, 35, root_state, lambda done, total: calls.append((done, total))
        )
        assert len(calls) == 4
        assert calls[-1] == (35, 35)

    def test_non_positive_workers_fall_back(self, kernel, root_state):
        """Test n_workers <= 0 uses chunk size 1"""
        backend = ThreadBackend(n_workers=0, chunk_size=50)
        assert backend.chunk_size == 1
        assert backend.run(kernel, 5, root_state, None).shape == (5,)


class TestProcessBackend:
    """Test the process pool backend"""

    def test_matches_thread_backend(self, kernel, root_state):
        """Test processes and threads produce the same payoffs"""
        threads = ThreadBackend(n_workers=2).run(kernel, 40, root_state, None)
        procs = ProcessBackend(n_workers=2, chunk_size=8).run(kernel, 40, root_state, None)
        np.testing.assert_array_equal(procs, threads)
