r"""
Splittable pseudo-random generator states.

This module provides:

Classes
    :class:`GeneratorState` — Immutable position in a reproducible random stream

Functions
    :func:`bernoulli` — Single Bernoulli draw threaded through a state
    :func:`bernoulli_steps` — Block of Bernoulli draws threaded through a state

Every operation is a pure function of its input state. Randomness comes from a
:class:`numpy.random.Philox` bit generator keyed by a :class:`numpy.random.SeedSequence`;
splitting derives child sequences by extending the parent's ``spawn_key``, the same
mechanism used by :meth:`numpy.random.SeedSequence.spawn`, but without mutating the
parent's spawn counter.

Example
-------
>>> root = GeneratorState.from_seed(42)
>>> value, nxt = root.next()
>>> 0.0 <= value < 1.0
True
>>> root.next()[0] == value  # pure: the same state always yields the same draw
True
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

import numpy as np

__all__ = [
    "GeneratorState",
    "SeedLike",
    "bernoulli",
    "bernoulli_steps",
]


@dataclass(frozen=True, eq=False)
class GeneratorState:
    r"""
    Opaque, immutable token for a position in a pseudo-random stream.

    Attributes
    ----------
    seed_seq : :class:`numpy.random.SeedSequence`
        Identity of the stream. Never mutated by this class.
    position : int
        Number of uniform draws already taken from the stream.
    bit_state : dict or None
        Frozen :class:`~numpy.random.Philox` state at :attr:`position`. ``None`` means
        the stream has not been drawn from yet and is rebuilt from :attr:`seed_seq`.

    Notes
    -----
    Two states compare equal when they have the same entropy, ``spawn_key`` and
    position, which fully determines every value they will produce.
    """

    seed_seq: np.random.SeedSequence
    position: int = 0
    bit_state: Optional[dict[str, Any]] = None

    @classmethod
    def from_seed(cls, seed: "SeedLike" = None) -> "GeneratorState":
        r"""
        Build a root state.

        Parameters
        ----------
        seed : int, SeedSequence, GeneratorState or None
            ``None`` draws fresh entropy from the OS; the chosen entropy is kept on
            :attr:`entropy` so the run can be replayed. A :class:`GeneratorState` is
            returned unchanged.

        Returns
        -------
        GeneratorState
        """
        if isinstance(seed, cls):
            return seed
        if isinstance(seed, np.random.SeedSequence):
            return cls(seed_seq=seed)
        return cls(seed_seq=np.random.SeedSequence(seed))

    @property
    def entropy(self):
        """Root entropy of the stream."""
        return self.seed_seq.entropy

    @property
    def spawn_key(self) -> tuple[int, ...]:
        """Path of this stream in the split tree."""
        return tuple(self.seed_seq.spawn_key)

    def _key(self) -> tuple:
        entropy = self.seed_seq.entropy
        if isinstance(entropy, (list, tuple, np.ndarray)):
            entropy = tuple(int(e) for e in entropy)
        return (entropy, self.spawn_key, self.position)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GeneratorState):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def _bit_generator(self) -> np.random.Philox:
        """Return a fresh bit generator positioned at this state."""
        if self.bit_state is None:
            return np.random.Philox(self.seed_seq)
        # Placeholder key, overwritten by the restored state.
        bitgen = np.random.Philox(key=0)
        bitgen.state = self.bit_state
        return bitgen

    def uniforms(self, size: int) -> tuple[np.ndarray, "GeneratorState"]:
        r"""
        Draw ``size`` uniforms on :math:`[0, 1)` and return the successor state.

        The values equal those of ``size`` successive :meth:`next` calls.

        Parameters
        ----------
        size : int
            Number of draws.

        Returns
        -------
        tuple[ndarray, GeneratorState]
            Draws of shape ``(size,)`` and the state after them.
        """
        bitgen = self._bit_generator()
        values = np.random.Generator(bitgen).random(size)
        return values, GeneratorState(self.seed_seq, self.position + size, bitgen.state)

    def next(self) -> tuple[float, "GeneratorState"]:
        """Draw one uniform on ``[0, 1)`` and return it with the successor state."""
        values, state = self.uniforms(1)
        return float(values[0]), state

    def child(self, index: int) -> "GeneratorState":
        r"""
        Return the ``index``-th child stream of this state.

        Child identities extend :attr:`spawn_key` with ``(position, index)``, so a
        state and any of its successors never hand out the same children.
        """
        ss = np.random.SeedSequence(
            self.seed_seq.entropy,
            spawn_key=self.spawn_key + (self.position, int(index)),
            pool_size=self.seed_seq.pool_size,
        )
        return GeneratorState(seed_seq=ss)

    def spawn(self, n_children: int) -> list["GeneratorState"]:
        r"""
        Split into ``n_children`` statistically independent streams.

        Parameters
        ----------
        n_children : int
            Number of child states.

        Returns
        -------
        list of GeneratorState
            ``result[i]`` depends only on this state and ``i``.

        Examples
        --------
        >>> root = GeneratorState.from_seed(7)
        >>> root.spawn(3)[1] == root.child(1)
        True
        """
        return [self.child(i) for i in range(n_children)]

    def split(self) -> tuple["GeneratorState", "GeneratorState"]:
        """Split into two independent streams."""
        left, right = self.spawn(2)
        return left, right


SeedLike = Union[int, np.random.SeedSequence, GeneratorState, None]


def bernoulli(p: float, state: GeneratorState) -> tuple[int, GeneratorState]:
    r"""
    Draw a Bernoulli(:math:`p`) outcome.

    Parameters
    ----------
    p : float
        Success probability. Not checked: ``p <= 0`` always yields ``0`` and
        ``p > 1`` always yields ``1``.
    state : GeneratorState
        Entry state.

    Returns
    -------
    tuple[int, GeneratorState]
        ``1`` if the uniform draw is below ``p`` else ``0``, and the successor state.
    """
    value, state = state.next()
    return (1 if value < p else 0), state


def bernoulli_steps(p: float, state: GeneratorState, size: int) -> tuple[np.ndarray, GeneratorState]:
    """Vectorized :func:`bernoulli`: ``size`` outcomes as an ``int8`` array."""
    values, state = state.uniforms(size)
    return (values < p).astype(np.int8), state
