"""
Segmentation models: the prefix/stem/suffix lattice model and the
single split point model.
"""

__all__ = ['Segmentation', 'SegmentationModel', 'SplitModel',
           'read_segmentation']

import collections
import logging
import math

from . import fst, utils
from .exception import EmptyLatticeError, MalformedPathError
from .grammar import MORPHEME, PREFIX_STEM, STEM_SUFFIX, build_grammar
from .lexicon import Vocabulary
from .prob import BetaGeometric, DirichletMultinomial

_logger = logging.getLogger(__name__)

Segmentation = collections.namedtuple('Segmentation',
                                      ['prefixes', 'stem', 'suffixes'])

# Regions of a word, in the order they are read
_PREFIX, _STEM, _SUFFIX = range(3)


def read_segmentation(labels, trie):
    """Decodes the output labels of a lattice path into a Segmentation,
    using the trie of the word to map morphs to substring ids.

    Raises MalformedPathError if the labels do not describe exactly one
    stem with well-formed prefix and suffix runs.
    """
    prefixes = []
    suffixes = []
    stem = None
    region = _PREFIX
    node = trie
    for label in labels:
        if label == MORPHEME:
            if node is trie or region == _STEM:
                raise MalformedPathError(labels, 'misplaced morph boundary')
            (prefixes if region == _PREFIX else suffixes).append(node.label)
            node = trie
        elif label == PREFIX_STEM:
            if node is not trie or region != _PREFIX:
                raise MalformedPathError(labels, 'misplaced stem start')
            region = _STEM
        elif label == STEM_SUFFIX:
            if node is trie or region != _STEM:
                raise MalformedPathError(labels, 'misplaced stem end')
            stem = node.label
            node = trie
            region = _SUFFIX
        else:
            node = node.children.get(label)
            if node is None:
                raise MalformedPathError(labels,
                                         'unknown morph at "{}"'.format(label))
    if stem is None:
        raise MalformedPathError(labels, 'no stem')
    if node is not trie:
        raise MalformedPathError(labels, 'unterminated morph')
    return Segmentation(tuple(prefixes), stem, tuple(suffixes))


def _run_cost(length_model, length):
    stop = length_model.stop()
    return -length * math.log(1.0 - stop) - math.log(stop)


def _sample_path(lattice, rng):
    """Draws a path with probability proportional to its weight."""
    beta = fst.shortest_distance(lattice, reverse=True)
    stochastic = fst.reweight_to_initial(lattice, beta)
    return fst.random_path(stochastic, rng)


class SegmentationModel(object):
    """Prefix/stem/suffix model of words.

    Each word is analyzed as zero or more prefixes, one stem and zero or
    more suffixes. The morphs of each region are drawn from their own
    Dirichlet-Multinomial over all substrings, and the number of prefixes
    and suffixes from Beta-Geometric run length models.

    Arguments:
        alpha_prefix, alpha_stem, alpha_suffix :  Concentration parameters
            of the morph models.
        word_vocabulary :  Vocabulary of the word types.
        substring_vocabulary :  Vocabulary of all substrings of the words.
        tries :  A SubstringTrie for each word id
                 (see lexicon.build_substring_index).
        length_alpha, length_beta :  Beta prior of the run length models.
    """

    def __init__(self, alpha_prefix, alpha_stem, alpha_suffix,
                 word_vocabulary, substring_vocabulary, tries,
                 length_alpha=1.0, length_beta=1.0):
        self.word_vocabulary = word_vocabulary
        self.substring_vocabulary = substring_vocabulary
        self.tries = tries
        n_substrings = len(substring_vocabulary)
        self.prefix_model = DirichletMultinomial(n_substrings, alpha_prefix)
        self.stem_model = DirichletMultinomial(n_substrings, alpha_stem)
        self.suffix_model = DirichletMultinomial(n_substrings, alpha_suffix)
        self.prefix_length_model = BetaGeometric(length_alpha, length_beta)
        self.suffix_length_model = BetaGeometric(length_alpha, length_beta)
        # The word chains are needed for every lattice
        self._chains = [fst.linear_chain(word)
                        for word in word_vocabulary]

    def build_grammar(self, word_id, semiring=fst.LOG):
        return build_grammar(self.tries[word_id],
                             self.prefix_model,
                             self.stem_model,
                             self.suffix_model,
                             self.prefix_length_model,
                             self.suffix_length_model,
                             semiring=semiring)

    def build_lattice(self, word_id, semiring=fst.LOG):
        """All analyses of the word, weighted by the current counts.

        The output labels of each accepting path spell the word with
        boundary symbols inserted.
        """
        grammar = self.build_grammar(word_id, semiring)
        chain = self._chains[word_id]
        if chain.semiring is not semiring:
            chain = chain.copy(semiring)
        lattice = fst.compose(chain, grammar)
        lattice = fst.project_output(fst.rm_epsilon(lattice))
        if lattice.is_empty():
            raise EmptyLatticeError(self.word_vocabulary.convert(word_id))
        return lattice

    def resample(self, word_id, rng, uniform=False):
        """Draws a new analysis of the word and adds it to the counts.

        Arguments:
            word_id :  The word to analyze.
            rng :  A random.Random instance.
            uniform :  Draw uniformly among all analyses, ignoring the
                       counts. Used for initialization.
        Returns:
            The drawn Segmentation.
        """
        lattice = self.build_lattice(word_id)
        if uniform:
            lattice = fst.unit_weights(lattice)
        path = _sample_path(lattice, rng)
        segmentation = read_segmentation(fst.path_output(path),
                                         self.tries[word_id])
        self.assign(word_id, segmentation)
        return segmentation

    def assign(self, word_id, segmentation):
        """Adds an analysis of the word to the counts."""
        self._update_counts(segmentation, 1)

    def unassign(self, word_id, segmentation):
        """Removes an analysis previously drawn by resample."""
        self._update_counts(segmentation, -1)

    def decode(self, word_id):
        """Most probable analysis of the word (Viterbi).
        Does not change the counts.
        """
        lattice = self.build_lattice(word_id, fst.TROPICAL)
        path = fst.shortest_path(lattice)
        if path is None:
            raise EmptyLatticeError(self.word_vocabulary.convert(word_id))
        return read_segmentation(fst.path_output(path), self.tries[word_id])

    def word_logprob(self, word_id):
        """Log-probability of the word, summed over all its analyses."""
        lattice = self.build_lattice(word_id)
        beta = fst.shortest_distance(lattice, reverse=True)
        return -beta[lattice.start]

    def analysis_cost(self, segmentation):
        """-log of the joint probability of an analysis under the
        current counts: the weight of its path in the grammar.
        Run lengths use the posterior mean of the stopping probability.
        """
        cost = 0.0
        for p in segmentation.prefixes:
            cost -= math.log(self.prefix_model.prob(p))
        cost += _run_cost(self.prefix_length_model,
                          len(segmentation.prefixes))
        cost -= math.log(self.stem_model.prob(segmentation.stem))
        for s in segmentation.suffixes:
            cost -= math.log(self.suffix_model.prob(s))
        cost += _run_cost(self.suffix_length_model,
                          len(segmentation.suffixes))
        return cost

    def log_likelihood(self):
        """Log-likelihood of all current analyses, summed over the
        five count models."""
        return (self.prefix_model.log_likelihood()
                + self.prefix_length_model.log_likelihood()
                + self.stem_model.log_likelihood()
                + self.suffix_model.log_likelihood()
                + self.suffix_length_model.log_likelihood())

    def morphs(self, segmentation):
        """The analysis as strings: (prefixes, stem, suffixes)"""
        convert = self.substring_vocabulary.convert
        return ([convert(p) for p in segmentation.prefixes],
                convert(segmentation.stem),
                [convert(s) for s in segmentation.suffixes])

    def format_segmentation(self, word_id, segmentation):
        """p1^p2^<stem>^s1^s2"""
        (prefixes, stem, suffixes) = self.morphs(segmentation)
        out = ''.join(p + MORPHEME for p in prefixes)
        out += PREFIX_STEM + stem + STEM_SUFFIX
        out += ''.join(MORPHEME + s for s in suffixes)
        return out

    def _update_counts(self, segmentation, direction):
        method = 'increment' if direction > 0 else 'decrement'
        for p in segmentation.prefixes:
            getattr(self.prefix_model, method)(p)
        getattr(self.prefix_length_model, method)(len(segmentation.prefixes))
        getattr(self.stem_model, method)(segmentation.stem)
        for s in segmentation.suffixes:
            getattr(self.suffix_model, method)(s)
        getattr(self.suffix_length_model, method)(len(segmentation.suffixes))

    def __repr__(self):
        return ('SegmentationModel(prefix ~ {}, |prefix| ~ {}, '
                'stem ~ {}, suffix ~ {}, |suffix| ~ {})'.format(
                    self.prefix_model, self.prefix_length_model,
                    self.stem_model,
                    self.suffix_model, self.suffix_length_model))


class SplitModel(object):
    """Splits each word once, into a prefix and a suffix that may be empty.

    Prefixes and suffixes are drawn from their own Dirichlet-Multinomial
    over all prefixes and suffixes of the words. The analysis of a word
    is the split offset.
    """

    def __init__(self, alpha_prefix, alpha_suffix, word_vocabulary):
        self.word_vocabulary = word_vocabulary
        self.prefix_vocabulary = Vocabulary()
        self.suffix_vocabulary = Vocabulary()
        for word in word_vocabulary:
            for split in range(len(word) + 1):
                self.prefix_vocabulary.encode(word[:split])
                self.suffix_vocabulary.encode(word[split:])
        _logger.info('Found {} prefixes, {} suffixes'.format(
            len(self.prefix_vocabulary), len(self.suffix_vocabulary)))
        self.prefix_model = DirichletMultinomial(
            len(self.prefix_vocabulary), alpha_prefix)
        self.suffix_model = DirichletMultinomial(
            len(self.suffix_vocabulary), alpha_suffix)

    def _parts(self, word_id, split):
        word = self.word_vocabulary.convert(word_id)
        return (self.prefix_vocabulary.convert(word[:split]),
                self.suffix_vocabulary.convert(word[split:]))

    def _split_probs(self, word_id):
        word = self.word_vocabulary.convert(word_id)
        probs = []
        for split in range(len(word) + 1):
            (t, f) = self._parts(word_id, split)
            probs.append(self.prefix_model.prob(t) *
                         self.suffix_model.prob(f))
        return probs

    def resample(self, word_id, rng, uniform=False):
        if uniform:
            word = self.word_vocabulary.convert(word_id)
            split = rng.randint(0, len(word))
        else:
            probs = self._split_probs(word_id)
            total = sum(probs)
            split = utils.categorical(
                rng, [-math.log(p / total) for p in probs])
        self.assign(word_id, split)
        return split

    def assign(self, word_id, split):
        (t, f) = self._parts(word_id, split)
        self.prefix_model.increment(t)
        self.suffix_model.increment(f)

    def unassign(self, word_id, split):
        (t, f) = self._parts(word_id, split)
        self.prefix_model.decrement(t)
        self.suffix_model.decrement(f)

    def decode(self, word_id):
        """Most probable split; ties go to the longest prefix."""
        best = None
        best_prob = -1.0
        for (split, prob) in enumerate(self._split_probs(word_id)):
            if prob >= best_prob:
                best = split
                best_prob = prob
        return best

    def word_logprob(self, word_id):
        return math.log(sum(self._split_probs(word_id)))

    def log_likelihood(self):
        return (self.prefix_model.log_likelihood()
                + self.suffix_model.log_likelihood())

    def format_segmentation(self, word_id, split):
        word = self.word_vocabulary.convert(word_id)
        return '_\t{}\t{}'.format(word[:split], word[split:])

    def __repr__(self):
        return 'SplitModel(prefix ~ {}, suffix ~ {})'.format(
            self.prefix_model, self.suffix_model)
