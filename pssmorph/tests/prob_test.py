#!/usr/bin/env python
"""
Tests for the count models.
"""

import math
import unittest

from pssmorph.exception import ModelIndexError, ModelStateError
from pssmorph.prob import BetaGeometric, DirichletMultinomial


class TestDirichletMultinomial(unittest.TestCase):
    def setUp(self):
        self.model = DirichletMultinomial(4, 0.5)

    def test_uniform_when_empty(self):
        for k in range(4):
            self.assertAlmostEqual(self.model.prob(k), 0.25)

    def test_probs_sum_to_one(self):
        for k in (0, 0, 1, 3, 0):
            self.model.increment(k)
        probs = [self.model.prob(k) for k in range(4)]
        self.assertAlmostEqual(sum(probs), 1.0)
        for p in probs:
            self.assertTrue(0.0 < p < 1.0)
        # (alpha + 3) / (4 * alpha + 5)
        self.assertAlmostEqual(probs[0], 3.5 / 7.0)

    def test_increment_decrement_restores_state(self):
        self.model.increment(2)
        before = (list(self.model.counts), self.model.total)
        self.model.increment(1)
        self.model.decrement(1)
        self.assertEqual((list(self.model.counts), self.model.total),
                         before)

    def test_decrement_empty_bucket(self):
        self.model.increment(0)
        self.assertRaises(ModelStateError, self.model.decrement, 1)
        self.assertEqual(self.model.total, 1)

    def test_index_out_of_range(self):
        self.assertRaises(ModelIndexError, self.model.increment, 4)
        self.assertRaises(ModelIndexError, self.model.prob, -1)
        # Also usable as a plain IndexError
        self.assertRaises(IndexError, self.model.decrement, 10)

    def test_log_likelihood_chain_rule(self):
        # The marginal likelihood equals the product of the
        # sequential predictive probabilities
        expected = 0.0
        for k in (0, 0, 1, 3, 0, 2, 2):
            expected += math.log(self.model.prob(k))
            self.model.increment(k)
        self.assertAlmostEqual(self.model.log_likelihood(), expected)

    def test_log_likelihood_finite(self):
        self.assertEqual(self.model.log_likelihood(), 0.0)
        tiny = DirichletMultinomial(1000, 0.001)
        for k in range(0, 1000, 7):
            tiny.increment(k)
        ll = tiny.log_likelihood()
        self.assertFalse(math.isnan(ll))
        self.assertFalse(math.isinf(ll))
        self.assertTrue(ll < 0)


class TestBetaGeometric(unittest.TestCase):
    def test_stop(self):
        model = BetaGeometric(1.0, 1.0)
        self.assertAlmostEqual(model.stop(), 0.5)
        model.increment(3)
        # (1 + 1) / (1 + 1 + 1 + 3)
        self.assertAlmostEqual(model.stop(), 2.0 / 6.0)

    def test_prob_normalized(self):
        model = BetaGeometric(1.0, 1.0)
        for _ in range(5):
            model.increment(0)
        # Beta(6, 1) posterior
        self.assertAlmostEqual(model.prob(0), 6.0 / 7.0)
        total = sum(model.prob(length) for length in range(1000))
        self.assertAlmostEqual(total, 1.0, places=4)

    def test_log_likelihood_chain_rule(self):
        model = BetaGeometric(2.0, 0.5)
        expected = 0.0
        for length in (0, 2, 1, 0, 0, 4):
            expected += math.log(model.prob(length))
            model.increment(length)
        self.assertAlmostEqual(model.log_likelihood(), expected)

    def test_increment_decrement_restores_state(self):
        model = BetaGeometric()
        model.increment(2)
        model.increment(1)
        model.decrement(1)
        self.assertEqual((model.runs, model.length), (1, 2))
        self.assertRaises(ModelStateError, model.decrement, 3)
        model.decrement(2)
        self.assertEqual((model.runs, model.length), (0, 0))
        self.assertRaises(ModelStateError, model.decrement, 0)


if __name__ == '__main__':
    unittest.main()
