"""
Execution backends for the Asian option pricer.

This subpackage provides pluggable execution strategies:

CPU Backends
    :class:`SequentialBackend` — Single-threaded execution over one shared stream
    :class:`ThreadBackend` — Thread-based parallelism
    :class:`ProcessBackend` — Process-based parallelism

Utilities
    :func:`make_blocks` — Chunking helper for parallel work distribution
    :func:`chunk_size_for` — Default chunk length heuristic
    :func:`spawn_trial_states` — Per-trial generator fan-out
    :func:`worker_run_chunk` — Top-level worker for process pools
    :func:`is_windows_platform` — Platform detection helper

Protocol
    :class:`ExecutionBackend` — Interface for custom backends
"""

from .base import (
    CHUNKS_PER_WORKER,
    ExecutionBackend,
    chunk_size_for,
    is_windows_platform,
    make_blocks,
    prepare_blocks,
    spawn_trial_states,
    worker_run_chunk,
)
from .parallel import ProcessBackend, ThreadBackend
from .sequential import SequentialBackend

__all__ = [
    # Protocol
    "ExecutionBackend",
    # CPU Backends
    "SequentialBackend",
    "ThreadBackend",
    "ProcessBackend",
    # Utility Functions
    "CHUNKS_PER_WORKER",
    "chunk_size_for",
    "make_blocks",
    "prepare_blocks",
    "spawn_trial_states",
    "worker_run_chunk",
    "is_windows_platform",
]
