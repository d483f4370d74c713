"""
The segmentation grammar: a weighted transducer accepting every
(prefix)* stem (suffix)* analysis of the substrings in a trie, and writing
the analysis with boundary symbols on its output tape.
"""

__all__ = ['MORPHEME', 'PREFIX_STEM', 'STEM_SUFFIX', 'BOUNDARY_SYMBOLS',
           'build_grammar', 'add_substring_arcs']

import logging
import math

from .fst import Fst, LOG, EPSILON

_logger = logging.getLogger(__name__)

# Closes a prefix or suffix morpheme
MORPHEME = '^'
# Ends the prefix run
PREFIX_STEM = '<'
# Ends the stem
STEM_SUFFIX = '>'

BOUNDARY_SYMBOLS = (MORPHEME, PREFIX_STEM, STEM_SUFFIX)


def add_substring_arcs(grammar, node, start, end, model):
    """Adds one path from start to end for every substring in the trie
    below node, weighted by the model probability of the substring.

    A character leading to a node with children gets two arcs: one
    ending the morpheme, and a free one continuing it.
    """
    for (char, child) in node.children.items():
        cost = -math.log(model.prob(child.label))
        grammar.add_arc(start, char, char, cost, end)
        if child.children:
            k = grammar.add_state()
            grammar.add_arc(start, char, char, grammar.semiring.one, k)
            add_substring_arcs(grammar, child, k, end, model)


def _add_run(grammar, trie, start, model, stop):
    """Zero or more morphemes, each followed by MORPHEME.
    Returns the exit state of the run.
    """
    loop_cost = -math.log(1.0 - stop)
    one = grammar.semiring.one

    entry = grammar.add_state()
    grammar.add_arc(start, EPSILON, EPSILON, one, entry)
    end = grammar.add_state()
    add_substring_arcs(grammar, trie, entry, end, model)
    loop_join = grammar.add_state()
    grammar.add_arc(end, EPSILON, MORPHEME, loop_cost, loop_join)
    # another morpheme
    grammar.add_arc(loop_join, EPSILON, EPSILON, one, entry)
    exit_state = grammar.add_state()
    # no morphemes at all
    grammar.add_arc(start, EPSILON, EPSILON, one, exit_state)
    grammar.add_arc(loop_join, EPSILON, EPSILON, one, exit_state)
    return exit_state


def build_grammar(trie, prefix_model, stem_model, suffix_model,
                  prefix_length_model, suffix_length_model, semiring=LOG):
    """Builds the grammar from the current state of the count models.

    The weight of a complete path is -log of the joint probability of
    the analysis: the morph probabilities of each prefix, the stem and each
    suffix, times the geometric probabilities of both run lengths.

    Arguments:
        trie :  SubstringTrie of the word to analyze.
        prefix_model, stem_model, suffix_model :  DirichletMultinomial
            models over substring ids.
        prefix_length_model, suffix_length_model :  BetaGeometric
            models of the number of prefixes and suffixes.
        semiring :  The semiring of the returned Fst.
    """
    grammar = Fst(semiring)

    prefix_start = grammar.add_state()
    grammar.set_start(prefix_start)
    prefix_stop = prefix_length_model.stop()
    prefix_exit = _add_run(grammar, trie, prefix_start,
                           prefix_model, prefix_stop)

    stem_start = grammar.add_state()
    grammar.add_arc(prefix_exit, EPSILON, PREFIX_STEM,
                    -math.log(prefix_stop), stem_start)
    stem_end = grammar.add_state()
    add_substring_arcs(grammar, trie, stem_start, stem_end, stem_model)

    suffix_start = grammar.add_state()
    grammar.add_arc(stem_end, EPSILON, STEM_SUFFIX, semiring.one,
                    suffix_start)
    suffix_stop = suffix_length_model.stop()
    suffix_exit = _add_run(grammar, trie, suffix_start,
                           suffix_model, suffix_stop)

    final = grammar.add_state()
    grammar.add_arc(suffix_exit, EPSILON, EPSILON,
                    -math.log(suffix_stop), final)
    grammar.set_final(final)
    return grammar
