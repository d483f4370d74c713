import collections
import logging
import time

_logger = logging.getLogger(__name__)


class IterationStatistics(object):
    """Collects statistics of the sampler after each iteration.
    Register the callback method in GibbsSampler.iteration_callbacks.
    """

    FIELDS = ('iteration', 'duration', 'log_likelihood', 'perplexity',
              'prefixes_per_token', 'suffixes_per_token', 'stem_types')

    def __init__(self, title=None):
        self.rows = []
        self.t_prev = None
        if title is None:
            self.title = 'iteration statistics {}'.format(
                time.strftime("%a, %d.%m.%Y %H:%M:%S"))
        else:
            self.title = title

    def register(self, sampler):
        """Adds the callback to the sampler and starts the clock of the
        next iteration."""
        sampler.iteration_callbacks.append(self.callback)
        self.t_prev = time.time()

    def callback(self, sampler):
        t_cur = time.time()
        if self.t_prev is None:
            duration = 0.0
        else:
            duration = t_cur - self.t_prev

        ll = sampler.model.log_likelihood()
        prefixes = 0
        suffixes = 0
        stems = collections.Counter()
        for (_, segmentation) in sampler.token_segmentations():
            # SplitModel analyses are plain offsets
            if not hasattr(segmentation, 'stem'):
                continue
            prefixes += len(segmentation.prefixes)
            suffixes += len(segmentation.suffixes)
            stems[segmentation.stem] += 1
        tokens = float(max(sampler.num_tokens, 1))
        self.rows.append((sampler.iteration,
                          duration,
                          ll,
                          sampler.perplexity(ll),
                          prefixes / tokens,
                          suffixes / tokens,
                          len(stems)))
        # Time spent here is not part of the next iteration
        self.t_prev = time.time()

    def __len__(self):
        return len(self.rows)

    def column(self, field):
        i = self.FIELDS.index(field)
        return [row[i] for row in self.rows]
