import math
import sys


# Progress dots for the sampling sweeps:
# Print a dot for every GENERATOR_DOT_FREQ:th item.
# Set to <= 0 to disable progress bar.
GENERATOR_DOT_FREQ = 100

show_progress_bar = True


def minargmin(sequence):
    """Returns the minimum value and the first index at which it can be
    found in the input sequence."""
    best = (None, None)
    for (i, value) in enumerate(sequence):
        if best[0] is None or value < best[0]:
            best = (value, i)
    return best


def categorical(rng, costs):
    """Draws an index from a distribution given as costs (-log probs).

    The costs need not be normalized exactly: rounding errors are absorbed
    by the last outcome with nonzero probability.
    """
    x = rng.random()
    last = None
    for (i, cost) in enumerate(costs):
        if cost == float('inf'):
            continue
        p = math.exp(-cost)
        if x < p:
            return i
        x -= p
        last = i
    assert last is not None, 'all outcomes have zero probability'
    return last


def logbeta(a, b):
    """Logarithm of the Beta function"""
    return math.lgamma(a) + math.lgamma(b) - math.lgamma(a + b)


def _generator_progress(generator):
    """Prints a progress bar for visualizing flow through a generator.
    The length of a generator is not known in advance, so the bar has
    no fixed length. GENERATOR_DOT_FREQ controls the frequency of dots.

    This function wraps the argument generator, returning a new generator.
    """

    if GENERATOR_DOT_FREQ <= 0 or not show_progress_bar:
        return generator

    def _progress_wrapper(generator):
        for (i, x) in enumerate(generator):
            if i % GENERATOR_DOT_FREQ == 0:
                sys.stderr.write('.')
                sys.stderr.flush()
            yield x
        sys.stderr.write('\n')

    return _progress_wrapper(generator)
