"""
Random number generation utilities.

Every generation call builds its own ``numpy.random.Generator`` from the
caller's seed. No generator is stored at module level, so concurrent
generations never share RNG state and identical seeds always replay the same
stream.
"""

import numpy as np

_SEED_MASK = 0xFFFFFFFFFFFFFFFF


def create_rng(seed: int, *stream: int) -> np.random.Generator:
    """
    Create an independent generator for one generation call.

    Args:
        seed: Signed 64-bit seed supplied by the caller
        stream: Optional extra integers selecting an independent sub-stream
            (used to decorrelate noise kinds that share a seed)

    Returns:
        Freshly seeded ``numpy.random.Generator``
    """
    entropy = [int(seed) & _SEED_MASK] + [int(s) & _SEED_MASK for s in stream]
    return np.random.default_rng(np.random.SeedSequence(entropy))
