"""
Collapsed Gibbs sampling over the tokens of a corpus.

The tokens of one sweep may be resampled by several worker threads.
The workers share the count models of the segmentation model, and every
single count update is atomic, but removing the old analysis of a token
and drawing its new one is not: a worker may see counts that lack the
removal, or include the new draw, of a token processed at the same
time. This is an asynchronous approximation of sequential Gibbs sampling
and it is kept on purpose. The driver waits for all tokens of a sweep
before starting the next one.
"""

__all__ = ['GibbsSampler']

import logging
import math
import random
from concurrent.futures import ThreadPoolExecutor

from . import utils

_logger = logging.getLogger(__name__)


class GibbsSampler(object):
    """Drives a segmentation model over a corpus.

    Arguments:
        model :  A SegmentationModel (or SplitModel).
        corpus :  The Corpus of word ids to analyze.
        workers :  Number of threads resampling the tokens of a sweep.
        seed :  Seed of the random number generator. Each token is given
                its own generator, seeded in corpus order.
    """

    def __init__(self, model, corpus, workers=1, seed=None):
        assert workers >= 1
        self.model = model
        self.corpus = corpus
        self.workers = workers
        self._rng = random.Random(seed)
        self._tokens = list(corpus.tokens())
        # One analysis per token. Only the worker of a token touches its slot.
        self.segmentations = [None] * len(self._tokens)
        self.iteration = 0
        # Called with the sampler after each iteration
        self.iteration_callbacks = []

    @property
    def num_tokens(self):
        return len(self._tokens)

    @property
    def initialized(self):
        return self.iteration > 0

    def initialize(self):
        """Draws a first analysis for every token, uniformly among all of
        its analyses."""
        self._run(self._initialize_token)

    def sweep(self):
        """Resamples the analysis of every token from its conditional
        distribution given the analyses of all the other tokens."""
        assert self.initialized, 'Must initialize before resampling'
        self._run(self._resample_token)

    def train(self, iterations, log_interval=1):
        """Runs the given number of iterations.
        The first iteration of an uninitialized sampler is the
        initialization.
        """
        for it in range(iterations):
            if self.initialized:
                self.sweep()
            else:
                self.initialize()
            self.iteration += 1
            _logger.debug('{}'.format(self.model))
            if (it + 1) % log_interval == 0 or it + 1 == iterations:
                ll = self.model.log_likelihood()
                _logger.info('Iteration {}/{}'.format(it + 1, iterations))
                _logger.info('LL={} ppl={}'.format(ll, self.perplexity(ll)))
            for callback in self.iteration_callbacks:
                callback(self)

    def decode(self):
        """Yields (word_id, analysis) with the most probable analysis
        of every word type."""
        for word_id in range(len(self.model.word_vocabulary)):
            yield (word_id, self.model.decode(word_id))

    def token_segmentations(self):
        """Yields (word_id, analysis) for every token, in corpus order."""
        return zip(self._tokens, self.segmentations)

    def perplexity(self, log_likelihood=None):
        if log_likelihood is None:
            log_likelihood = self.model.log_likelihood()
        if self.num_tokens == 0:
            return 1.0
        try:
            return math.exp(-log_likelihood / self.num_tokens)
        except OverflowError:
            return float('inf')

    def _initialize_token(self, i, rng):
        self.segmentations[i] = self.model.resample(self._tokens[i], rng,
                                                    uniform=True)

    def _resample_token(self, i, rng):
        word_id = self._tokens[i]
        self.model.unassign(word_id, self.segmentations[i])
        self.segmentations[i] = self.model.resample(word_id, rng)

    def _run(self, token_func):
        """Applies token_func(i, rng) to every token and waits for all."""
        seeds = [self._rng.getrandbits(32) for _ in self._tokens]
        if self.workers == 1:
            for (i, seed) in utils._generator_progress(enumerate(seeds)):
                token_func(i, random.Random(seed))
            return
        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            futures = [executor.submit(token_func, i, random.Random(seed))
                       for (i, seed) in enumerate(seeds)]
            try:
                for future in utils._generator_progress(futures):
                    future.result()
            except Exception:
                for future in futures:
                    future.cancel()
                raise
