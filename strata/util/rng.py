"""Deterministic seed handling for noise fields.

Seeds may be given as ints, descriptive strings ("archipelago") or None. The
noise kernel needs a number it can add to sample coordinates, so this module
turns any ``RandomSeed`` into one. String seeds go through crc32 so the same
string maps to the same terrain in every Python session.

Usage:
    from strata.util import rng

    seed = rng.noise_seed("archipelago")
    vegetation_seed = rng.derive_seed("archipelago", "layer.vegetation")

Domain naming convention (hierarchical):
    - "layer.ground", "layer.vegetation"
    - "predicate.scatter"
"""

from __future__ import annotations

import zlib
from random import Random

from strata.types import RandomSeed

# Every seed is folded into this range. The seed is added to float sample
# coordinates, and a huge seed would swallow their fractional part and put
# every sample on a lattice point, where the noise is zero.
SEED_RANGE = 65536


def noise_seed(seed: RandomSeed) -> int:
    """Convert a seed of any accepted form into a numeric noise seed.

    Args:
        seed: An int (folded into SEED_RANGE), a str (hashed with crc32), or None
            for a non-deterministic seed drawn from system entropy.

    Returns:
        The integer seed added to sample coordinates.
    """
    if seed is None:
        return Random().randrange(SEED_RANGE)
    if isinstance(seed, bool):
        raise TypeError("Seed must be int, str or None, not bool")
    if isinstance(seed, int):
        return seed % SEED_RANGE
    # Use crc32 instead of hash() - hash() is randomized per Python session via
    # PYTHONHASHSEED, which would break cross-session determinism
    return zlib.crc32(seed.encode()) % SEED_RANGE


def derive_seed(master_seed: RandomSeed, domain: str) -> int:
    """Derive an independent seed for a named domain from a master seed.

    The same (master_seed, domain) pair always gives the same result, and
    different domains give unrelated values.
    """
    if master_seed is None:
        return noise_seed(None)
    return zlib.crc32(f"{master_seed}:{domain}".encode()) % SEED_RANGE
