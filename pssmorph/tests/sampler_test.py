#!/usr/bin/env python
"""
Tests for the Gibbs sampling driver.
"""

import unittest

from pssmorph.diagnostics import IterationStatistics
from pssmorph.exception import ModelIndexError
from pssmorph.lexicon import Corpus, Vocabulary, build_substring_index
from pssmorph.model import SegmentationModel, SplitModel
from pssmorph.sampler import GibbsSampler
from pssmorph import utils

SENTENCES = [
    'the unhappy dog walked',
    'happiness is walking the dog',
    'unkindness walks',
    'the kind dog is happy',
    '',
    'dogs walked unhappily',
]

utils.show_progress_bar = False


def _make_corpus():
    vocabulary = Vocabulary()
    corpus = Corpus()
    for sentence in SENTENCES:
        corpus.add_sentence(vocabulary.encode(w) for w in sentence.split())
    return (corpus, vocabulary)


def _make_sampler(workers=1, seed=1, alpha=0.1):
    (corpus, vocabulary) = _make_corpus()
    substrings = Vocabulary()
    tries = build_substring_index(vocabulary, substrings)
    model = SegmentationModel(alpha, alpha, alpha, vocabulary, substrings,
                              tries)
    return GibbsSampler(model, corpus, workers=workers, seed=seed)


def _counts(model):
    return (list(model.prefix_model.counts),
            list(model.stem_model.counts),
            list(model.suffix_model.counts),
            (model.prefix_length_model.runs, model.prefix_length_model.length),
            (model.suffix_length_model.runs, model.suffix_length_model.length))


class TestGibbsSampler(unittest.TestCase):
    def test_initialize_is_worker_independent(self):
        sequential = _make_sampler(workers=1, seed=11)
        sequential.initialize()
        threaded = _make_sampler(workers=4, seed=11)
        threaded.initialize()
        self.assertEqual(sequential.segmentations, threaded.segmentations)
        self.assertEqual(_counts(sequential.model), _counts(threaded.model))

    def test_seed_reproducible(self):
        first = _make_sampler(seed=3)
        first.train(3)
        second = _make_sampler(seed=3)
        second.train(3)
        self.assertEqual(first.segmentations, second.segmentations)
        self.assertEqual(list(first.decode()), list(second.decode()))

    def test_counts_match_tokens(self):
        for workers in (1, 3):
            sampler = _make_sampler(workers=workers)
            sampler.train(4)
            model = sampler.model
            self.assertEqual(sampler.iteration, 4)
            self.assertEqual(sampler.num_tokens, 19)
            self.assertEqual(model.stem_model.total, sampler.num_tokens)
            self.assertEqual(model.prefix_length_model.runs,
                             sampler.num_tokens)
            self.assertEqual(model.suffix_length_model.runs,
                             sampler.num_tokens)
            self.assertEqual(model.prefix_model.total,
                             model.prefix_length_model.length)
            self.assertEqual(model.suffix_model.total,
                             model.suffix_length_model.length)

    def test_analyses_spell_the_tokens(self):
        sampler = _make_sampler(workers=2)
        sampler.train(2)
        model = sampler.model
        for (word_id, seg) in sampler.token_segmentations():
            (prefixes, stem, suffixes) = model.morphs(seg)
            self.assertEqual(''.join(prefixes) + stem + ''.join(suffixes),
                             model.word_vocabulary.convert(word_id))
        decoded = dict(sampler.decode())
        self.assertEqual(len(decoded), len(model.word_vocabulary))

    def test_single_word(self):
        vocabulary = Vocabulary()
        corpus = Corpus([[vocabulary.encode('unhappiness')]])
        substrings = Vocabulary()
        tries = build_substring_index(vocabulary, substrings)
        model = SegmentationModel(0.001, 0.001, 0.001, vocabulary,
                                  substrings, tries)
        sampler = GibbsSampler(model, corpus, seed=0)
        sampler.train(1)
        (_, seg) = list(sampler.token_segmentations())[0]
        (prefixes, stem, suffixes) = model.morphs(seg)
        self.assertEqual(''.join(prefixes) + stem + ''.join(suffixes),
                         'unhappiness')

    def test_perplexity(self):
        sampler = _make_sampler()
        sampler.train(1)
        ll = sampler.model.log_likelihood()
        self.assertTrue(sampler.perplexity(ll) > 1.0)
        empty = GibbsSampler(sampler.model, Corpus())
        self.assertEqual(empty.perplexity(), 1.0)

    def test_worker_errors_propagate(self):
        sampler = _make_sampler(workers=2)
        sampler.initialize()
        sampler.iteration = 1
        # Corrupt the bookkeeping of one token
        sampler.segmentations[0] = sampler.segmentations[0]._replace(
            stem=len(sampler.model.substring_vocabulary))
        self.assertRaises(ModelIndexError, sampler.sweep)

    def test_split_model(self):
        (corpus, vocabulary) = _make_corpus()
        model = SplitModel(0.5, 0.5, vocabulary)
        sampler = GibbsSampler(model, corpus, workers=2, seed=4)
        sampler.train(3)
        self.assertEqual(model.prefix_model.total, sampler.num_tokens)
        for (word_id, split) in sampler.decode():
            word = vocabulary.convert(word_id)
            self.assertTrue(0 <= split <= len(word))

    def test_statistics(self):
        sampler = _make_sampler()
        stats = IterationStatistics()
        stats.register(sampler)
        sampler.train(3)
        self.assertEqual(len(stats), 3)
        self.assertEqual(stats.column('iteration'), [1, 2, 3])
        for row in stats.rows:
            self.assertEqual(len(row), len(stats.FIELDS))
        for ll in stats.column('log_likelihood'):
            self.assertTrue(ll < 0)
        # The first iteration is timed too
        for duration in stats.column('duration'):
            self.assertTrue(duration > 0.0)


if __name__ == '__main__':
    unittest.main()
