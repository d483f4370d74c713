#!/usr/bin/env python
"""
Tests for the command line interface.
"""

import codecs
import os
import shutil
import tempfile
import unittest

from pssmorph.cmd import get_pssmorph_argparser, pssmorph_main
from pssmorph.exception import ArgumentException, InvalidCharacterError
from pssmorph.grammar import BOUNDARY_SYMBOLS
from pssmorph.io import PssMorphIO

CORPUS = """the unhappy dog walked
happiness is walking the dog
unkindness walks
"""


class TestArguments(unittest.TestCase):
    def setUp(self):
        self.parser = get_pssmorph_argparser()

    def _fails(self, argv):
        self.assertRaises(SystemExit, self.parser.parse_args, argv)

    def test_positional(self):
        args = self.parser.parse_args(['10', '0.5', '0.01', '2'])
        self.assertEqual(args.iterations, 10)
        self.assertEqual(args.alpha_prefix, 0.5)
        self.assertEqual(args.alpha_stem, 0.01)
        self.assertEqual(args.alpha_suffix, 2.0)
        self.assertEqual(args.infile, '-')
        self.assertEqual(args.outfile, '-')
        self.assertEqual(args.workers, 1)
        self.assertEqual(args.model_type, 'pss')

    def test_argument_count(self):
        self._fails([])
        self._fails(['10', '0.5', '0.5'])
        self._fails(['10', '0.5', '0.5', '0.5', '0.5'])

    def test_argument_values(self):
        self._fails(['0', '0.5', '0.5', '0.5'])
        self._fails(['1.5', '0.5', '0.5', '0.5'])
        self._fails(['10', 'x', '0.5', '0.5'])
        self._fails(['10', '0.5', '0', '0.5'])
        self._fails(['10', '0.5', '0.5', '0.5', '-j', '0'])
        self._fails(['10', '0.5', '0.5', '0.5', '--model', 'other'])


class TestMain(unittest.TestCase):
    def setUp(self):
        self.tempdir = tempfile.mkdtemp()
        self.infile = os.path.join(self.tempdir, 'corpus.txt')
        with codecs.open(self.infile, 'w', encoding='utf-8') as fobj:
            fobj.write(CORPUS)

    def tearDown(self):
        shutil.rmtree(self.tempdir)

    def _run(self, extra):
        outfile = os.path.join(self.tempdir, 'analysis.txt')
        argv = ['3', '0.1', '0.1', '0.1',
                '-i', self.infile, '-o', outfile,
                '-e', 'utf-8', '--seed', '1', '-v', '0'] + extra
        pssmorph_main(get_pssmorph_argparser().parse_args(argv))
        with codecs.open(outfile, 'r', encoding='utf-8') as fobj:
            return [line.rstrip('\n') for line in fobj]

    def test_output(self):
        lines = self._run(['-j', '2'])
        words = set(CORPUS.split())
        self.assertEqual(len(lines), len(words))
        for line in lines:
            (word, analysis) = line.split('\t')
            self.assertIn(word, words)
            self.assertEqual(analysis.count('<'), 1)
            self.assertEqual(analysis.count('>'), 1)
            stripped = ''.join(c for c in analysis
                               if c not in BOUNDARY_SYMBOLS)
            self.assertEqual(stripped, word)

    def test_split_model(self):
        lines = self._run(['--model', 'split'])
        for line in lines:
            (word, marker, prefix, suffix) = line.split('\t')
            self.assertEqual(marker, '_')
            self.assertEqual(prefix + suffix, word)

    def test_statistics_file(self):
        statsfile = os.path.join(self.tempdir, 'stats.tsv')
        self._run(['--statsfile', statsfile])
        with codecs.open(statsfile, 'r', encoding='utf-8') as fobj:
            lines = fobj.read().splitlines()
        # Comment, header and one row per iteration
        self.assertEqual(len(lines), 5)
        self.assertEqual(lines[1].split('\t')[0], 'iteration')

    def test_pickled_statistics_file(self):
        statsfile = os.path.join(self.tempdir, 'stats.pickled')
        self._run(['--statsfile', statsfile])
        stats = PssMorphIO().read_binary_file(statsfile)
        self.assertEqual(stats.column('iteration'), [1, 2, 3])
        for ll in stats.column('log_likelihood'):
            self.assertTrue(ll < 0)

    def test_word_logprobs_logged(self):
        with self.assertLogs('pssmorph.cmd', level='DEBUG') as cm:
            lines = self._run(['-v', '2'])
        logged = [m for m in cm.output if 'logprob=' in m]
        self.assertEqual(len(logged), len(lines))
        self.assertTrue(any('unkindness: logprob=-' in m for m in logged))

    def test_empty_corpus(self):
        with codecs.open(self.infile, 'w', encoding='utf-8') as fobj:
            fobj.write('\n\n')
        self.assertRaises(ArgumentException, self._run, [])

    def test_reserved_symbol(self):
        with codecs.open(self.infile, 'w', encoding='utf-8') as fobj:
            fobj.write('a<b\n')
        self.assertRaises(InvalidCharacterError, self._run, [])


if __name__ == '__main__':
    unittest.main()
