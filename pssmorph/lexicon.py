"""
Word and substring bookkeeping: vocabularies, the per-word substring
tries and the corpus of word ids.
"""

__all__ = ['Vocabulary', 'SubstringTrie', 'Corpus', 'build_substring_index']

import logging

_logger = logging.getLogger(__name__)


class Vocabulary(object):
    """Bidirectional mapping between strings and consecutive integer ids."""

    def __init__(self):
        self._ids = {}
        self._strings = []

    def encode(self, string):
        """Returns the id of the string, registering it if it is new."""
        try:
            return self._ids[string]
        except KeyError:
            self._strings.append(string)
            self._ids[string] = len(self._strings) - 1
            return self._ids[string]

    def convert(self, key):
        """Maps an id to its string, or a known string to its id."""
        if isinstance(key, int):
            return self._strings[key]
        return self._ids[key]

    def __contains__(self, string):
        return string in self._ids

    def __len__(self):
        return len(self._strings)

    def __iter__(self):
        return iter(self._strings)


class SubstringTrie(object):
    """Prefix tree over characters.
    Every node reached by inserting a string carries the string's label.
    """

    __slots__ = ['children', 'label']

    def __init__(self):
        self.children = {}
        self.label = None

    def insert(self, string, label):
        node = self
        for char in string:
            if char not in node.children:
                node.children[char] = SubstringTrie()
            node = node.children[char]
        node.label = label


class Corpus(object):
    """Sentences of word ids, in input order."""

    def __init__(self, sentences=None):
        self.sentences = [] if sentences is None else list(sentences)

    def add_sentence(self, word_ids):
        self.sentences.append(list(word_ids))

    @property
    def num_tokens(self):
        return sum(len(sentence) for sentence in self.sentences)

    def tokens(self):
        """Yields the word id of every token in corpus order."""
        for sentence in self.sentences:
            for word_id in sentence:
                yield word_id

    def __len__(self):
        return len(self.sentences)

    def __iter__(self):
        return iter(self.sentences)


def build_substring_index(word_vocabulary, substring_vocabulary):
    """Registers every contiguous substring of every word type.

    Returns a list with one SubstringTrie per word id, holding the
    substrings of that word labeled with their substring ids.
    """
    tries = []
    for word in word_vocabulary:
        trie = SubstringTrie()
        for i in range(len(word)):
            for j in range(i + 1, len(word) + 1):
                substring = word[i:j]
                trie.insert(substring, substring_vocabulary.encode(substring))
        tries.append(trie)
    _logger.info('Found {} substrings'.format(len(substring_vocabulary)))
    return tries
