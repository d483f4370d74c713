"""
Conjugate count models used to weight the segmentation grammar.

The models are shared by all sampling threads. Every single update or
read of a bucket holds the model lock, but a sequence of calls made by one
thread is not isolated from the calls of the others.
"""

__all__ = ['DirichletMultinomial', 'BetaGeometric']

import logging
import math
import threading

from .exception import ModelIndexError, ModelStateError
from .utils import logbeta

_logger = logging.getLogger(__name__)


class DirichletMultinomial(object):
    """Posterior predictive of a multinomial with a symmetric Dirichlet prior.

    Arguments:
        size :  The number of outcomes K, fixed for the model lifetime.
        alpha :  Concentration parameter of the prior.
    """

    def __init__(self, size, alpha):
        assert size > 0
        assert alpha > 0
        self.size = size
        self.alpha = float(alpha)
        self.counts = [0] * size
        self.total = 0
        self._lock = threading.Lock()

    def _check(self, k):
        if not 0 <= k < self.size:
            raise ModelIndexError(k, self.size)

    def increment(self, k):
        self._check(k)
        with self._lock:
            self.counts[k] += 1
            self.total += 1

    def decrement(self, k):
        self._check(k)
        with self._lock:
            if self.counts[k] == 0:
                raise ModelStateError(
                    'Decrementing outcome {} with zero count'.format(k))
            self.counts[k] -= 1
            self.total -= 1

    def prob(self, k):
        """(alpha + count[k]) / (K * alpha + N)"""
        self._check(k)
        with self._lock:
            return ((self.alpha + self.counts[k]) /
                    (self.size * self.alpha + self.total))

    def log_likelihood(self):
        """Marginal log-likelihood of the observed counts"""
        with self._lock:
            nonzero = [c for c in self.counts if c > 0]
            total = self.total
        ka = self.size * self.alpha
        ll = (math.lgamma(ka) - math.lgamma(ka + total)
              - len(nonzero) * math.lgamma(self.alpha))
        for count in nonzero:
            ll += math.lgamma(self.alpha + count)
        return ll

    def __repr__(self):
        return 'DirichletMultinomial(alpha={}, K={}, N={})'.format(
            self.alpha, self.size, self.total)


class BetaGeometric(object):
    """Run length model: a geometric distribution over the number of
    morphemes in a prefix or suffix run, with a Beta prior on the
    stopping probability.

    After N runs with a total length of L morphemes the posterior is
    Beta(alpha + N, beta + L).
    """

    def __init__(self, alpha=1.0, beta=1.0):
        assert alpha > 0 and beta > 0
        self.alpha = float(alpha)
        self.beta = float(beta)
        self.runs = 0
        self.length = 0
        self._lock = threading.Lock()

    def increment(self, length):
        with self._lock:
            self.runs += 1
            self.length += length

    def decrement(self, length):
        with self._lock:
            if self.runs == 0 or self.length < length:
                raise ModelStateError(
                    'Removing a run of length {} from {} runs of total '
                    'length {}'.format(length, self.runs, self.length))
            self.runs -= 1
            self.length -= length

    def stop(self):
        """Posterior mean of the stopping probability"""
        with self._lock:
            return ((self.alpha + self.runs) /
                    (self.alpha + self.beta + self.runs + self.length))

    def prob(self, length):
        """Posterior predictive probability of a run of the given length"""
        with self._lock:
            a = self.alpha + self.runs
            b = self.beta + self.length
        return math.exp(logbeta(a + 1, b + length) - logbeta(a, b))

    def log_likelihood(self):
        with self._lock:
            a = self.alpha + self.runs
            b = self.beta + self.length
        return logbeta(a, b) - logbeta(self.alpha, self.beta)

    def __repr__(self):
        return 'BetaGeometric(alpha={}, beta={}, N={}, L={})'.format(
            self.alpha, self.beta, self.runs, self.length)
