import bz2
import codecs
import datetime
import gzip
import locale
import logging
import sys

import morfessor

from . import get_version
from .exception import InvalidCharacterError
from .grammar import BOUNDARY_SYMBOLS
from .lexicon import Corpus, Vocabulary
from .utils import _generator_progress

_logger = logging.getLogger(__name__)


class PssMorphIO(morfessor.MorfessorIO):
    """Definition for all input and output files. Also handles all
    encoding issues.

    The only state this class has is the separators used in the data.
    Therefore, the same class instance can be used for multiple files.

    The corpus is read as sentences, one per line, with words separated
    by compound_separator. Empty lines are kept as empty sentences.
    """

    def __init__(self,
                 encoding=None,
                 comment_start='#',
                 compound_separator=r'\s+',
                 analysis_separator='\t',
                 lowercase=False):
        super(PssMorphIO, self).__init__(
            encoding=encoding,
            comment_start=comment_start,
            compound_separator=compound_separator,
            atom_separator=None,
            lowercase=lowercase)
        self.analysis_separator = analysis_separator
        self._version = get_version()

    def read_corpus_file(self, file_name, word_vocabulary=None):
        """Read one corpus file into a Corpus of word ids.

        Arguments:
            file_name :  The file to read, '-' for standard input.
            word_vocabulary :  Vocabulary to register the word types in.
                               A new one is created if not given.
        Returns:
            (corpus, word_vocabulary)
        Raises:
            InvalidCharacterError if a word contains a boundary symbol.
        """
        if word_vocabulary is None:
            word_vocabulary = Vocabulary()
        corpus = Corpus()
        _logger.info("Reading corpus from '%s'..." % file_name)
        for line in _generator_progress(
                self._read_text_file(file_name, raw=True)):
            sentence = []
            for word in self.compound_sep_re.split(line):
                if len(word) == 0:
                    continue
                self._check_word(word)
                sentence.append(word_vocabulary.encode(word))
            corpus.add_sentence(sentence)
        _logger.info('Read {} tokens, {} types'.format(
            corpus.num_tokens, len(word_vocabulary)))
        return (corpus, word_vocabulary)

    def write_segmentation_file(self, file_name, segmentations):
        """Write the analysis of each word type.

        Arguments:
            segmentations :  iterable of (word, analysis) string pairs.

        File format:
        <word><analysis_sep><analysis>
        """
        _logger.info("Saving analysis to '%s'..." % file_name)
        file_obj = self._open_text_file_write(file_name)
        try:
            for (word, analysis) in segmentations:
                file_obj.write('{}{}{}\n'.format(
                    word, self.analysis_separator, analysis))
        finally:
            self._close_text_file(file_name, file_obj)
        _logger.info("Done.")

    def write_statistics_file(self, file_name, stats):
        """Write the rows of an IterationStatistics as tab separated
        values, with a header line."""
        _logger.info("Saving iteration statistics to '%s'..." % file_name)
        file_obj = self._open_text_file_write(file_name)
        try:
            d = datetime.datetime.now().replace(microsecond=0)
            file_obj.write('# {} from {}, {!s}\n'.format(
                stats.title, self._version, d))
            file_obj.write('\t'.join(stats.FIELDS) + '\n')
            for row in stats.rows:
                file_obj.write('\t'.join('{}'.format(x) for x in row) + '\n')
        finally:
            self._close_text_file(file_name, file_obj)
        _logger.info("Done.")

    def _check_word(self, word):
        for symbol in BOUNDARY_SYMBOLS:
            if symbol in word:
                raise InvalidCharacterError(word, symbol)

    def _open_text_file_write(self, file_name_or_obj):
        """Open a file for writing with the appropriate compression/encoding"""
        if isinstance(file_name_or_obj, str):
            file_name = file_name_or_obj
            if file_name == '-':
                return sys.stdout
            elif file_name.endswith('.gz'):
                file_obj = gzip.open(file_name, 'wb')
            elif file_name.endswith('.bz2'):
                file_obj = bz2.BZ2File(file_name, 'wb')
            else:
                file_obj = open(file_name, 'wb')
        else:
            file_obj = file_name_or_obj

        if self.encoding is None:
            # Take encoding from locale if not set so far
            self.encoding = locale.getpreferredencoding()
        return codecs.getwriter(self.encoding)(file_obj)

    def _close_text_file(self, file_name_or_obj, file_obj):
        if not isinstance(file_name_or_obj, str):
            # Caller owns the stream
            file_obj.flush()
        elif file_name_or_obj == '-':
            sys.stdout.flush()
        else:
            file_obj.close()

    def _open_text_file_read(self, file_name_or_obj):
        """Open a file for reading with the appropriate compression/encoding"""
        if isinstance(file_name_or_obj, str):
            file_name = file_name_or_obj
            if file_name == '-':
                return sys.stdin
            if file_name.endswith('.gz'):
                file_obj = gzip.open(file_name, 'rb')
            elif file_name.endswith('.bz2'):
                file_obj = bz2.BZ2File(file_name, 'rb')
            else:
                file_obj = open(file_name, 'rb')
            if self.encoding is None:
                # Try to determine encoding if not set so far
                self.encoding = self._find_encoding(file_name)
        else:
            file_obj = file_name_or_obj
            if self.encoding is None:
                self.encoding = locale.getpreferredencoding()
        return codecs.getreader(self.encoding)(file_obj)

    def _read_text_file(self, file_name, raw=False):
        """Read a text file with the appropriate compression and encoding.

        Comments and empty lines are skipped unless raw is True.
        """
        inp = self._open_text_file_read(file_name)
        try:
            for line in inp:
                line = line.rstrip()
                if not raw and \
                   (len(line) == 0 or line.startswith(self.comment_start)):
                    continue
                if self.lowercase:
                    yield line.lower()
                else:
                    yield line
        except KeyboardInterrupt:
            if file_name == '-':
                _logger.info("Finished reading from stdin")
                return
            else:
                raise
        finally:
            if isinstance(file_name, str) and file_name != '-':
                inp.close()
