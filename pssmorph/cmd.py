import logging
import sys

from . import get_version, utils
from .diagnostics import IterationStatistics
from .exception import ArgumentException
from .io import PssMorphIO
from .lexicon import Vocabulary, build_substring_index
from .model import SegmentationModel, SplitModel
from .sampler import GibbsSampler
from .utils import _generator_progress

_logger = logging.getLogger(__name__)

BINARY_ENDINGS = ('.pickled', '.pickle', '.bin')

MODEL_TYPES = ('pss', 'split')


class ArgumentGroups(object):
    """Helper class for modular sharing of arguments."""
    def __init__(self, parser):
        self.parser = parser
        self._groups = {}

    def get(self, name):
        if name not in self._groups:
            self._groups[name] = (
                self.parser.add_argument_group(name).add_argument)
        return self._groups[name]


def _positive(convert, name):
    def check(value):
        import argparse
        try:
            x = convert(value)
        except ValueError:
            raise argparse.ArgumentTypeError(
                '{} must be a number, got "{}"'.format(name, value))
        if not x > 0:
            raise argparse.ArgumentTypeError(
                '{} must be positive, got "{}"'.format(name, value))
        return x
    return check


def get_pssmorph_argparser():
    import argparse
    parser = argparse.ArgumentParser(
        prog='pssmorph',
        description="""
{version}

Unsupervised segmentation of words into prefixes, a stem and suffixes,
by collapsed Gibbs sampling.

Command-line arguments:
""" .format(version=get_version()),
        epilog="""
Simple usage example:

  %(prog)s 50 0.001 0.001 0.001 < corpus.txt > analysis.txt
  %(prog)s 50 0.1 0.1 0.1 -j 4 --seed 1 -i corpus.txt -o analysis.txt

""",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False)
    parser.add_argument('iterations', metavar='<iterations>',
                        type=_positive(int, 'iterations'),
                        help='Number of sampling iterations, '
                             'including the initialization.')
    parser.add_argument('alpha_prefix', metavar='<alpha prefix>',
                        type=_positive(float, 'alpha prefix'),
                        help='Concentration of the prefix model.')
    parser.add_argument('alpha_stem', metavar='<alpha stem>',
                        type=_positive(float, 'alpha stem'),
                        help='Concentration of the stem model.')
    parser.add_argument('alpha_suffix', metavar='<alpha suffix>',
                        type=_positive(float, 'alpha suffix'),
                        help='Concentration of the suffix model.')
    groups = ArgumentGroups(parser)
    add_io_arguments(groups)
    add_training_arguments(groups)
    add_diagnostic_arguments(groups)
    add_other_arguments(groups)
    return parser


def add_io_arguments(argument_groups):
    add_arg = argument_groups.get('input and output')
    add_arg('-i', '--input', dest='infile', default='-', metavar='<file>',
            help='Read the corpus from file, one sentence per line '
                 '(plaintext, ".gz" or ".bz2"). '
                 'Default: read from standard input.')
    add_arg('-o', '--output', dest='outfile', default='-', metavar='<file>',
            help='Write the analysis of each word type to file. '
                 'Default: write to standard output.')

    add_arg = argument_groups.get('data format options')
    add_arg('-e', '--encoding', dest='encoding', metavar='<encoding>',
            help='Encoding of input and output files (if none is given, '
                 'both the local encoding and UTF-8 are tried).')
    add_arg('--compound-separator', dest='cseparator', type=str,
            default=r'\s+', metavar='<regexp>',
            help='Word separator regexp (default "%(default)s").')
    add_arg('--lowercase', dest='lowercase', default=False,
            action='store_true',
            help='Lowercase the input corpus.')


def add_training_arguments(argument_groups):
    add_arg = argument_groups.get('training and segmentation options')
    add_arg('-m', '--model', dest='model_type', default='pss',
            choices=MODEL_TYPES,
            help='Model type: "pss" for prefixes, a stem and suffixes, '
                 '"split" for a single split into two parts '
                 '(default %(default)s).')
    add_arg('-j', '--workers', dest='workers', default=1,
            type=_positive(int, 'workers'), metavar='<int>',
            help='Number of threads resampling the tokens '
                 '(default %(default)s).')
    add_arg('--seed', dest='seed', default=None, type=int, metavar='<int>',
            help='Seed for the random number generator. '
                 'Runs with the same seed and a single worker are '
                 'reproducible.')
    add_arg('--length-alpha', dest='length_alpha', default=1.0,
            type=_positive(float, 'length alpha'), metavar='<float>',
            help='First parameter of the Beta prior on the probability '
                 'of ending a prefix or suffix run (default %(default)s).')
    add_arg('--length-beta', dest='length_beta', default=1.0,
            type=_positive(float, 'length beta'), metavar='<float>',
            help='Second parameter of the Beta prior on the probability '
                 'of ending a prefix or suffix run (default %(default)s).')


def add_diagnostic_arguments(argument_groups):
    add_arg = argument_groups.get('diagnostic options')
    add_arg('--statsfile', dest='stats_file', metavar='<file>',
            help='Collect iteration statistics into this file. '
                 'Pickled if the name ends in ".pickled", '
                 'otherwise tab separated values.')
    add_arg('--log-interval', dest='log_interval', default=1,
            type=_positive(int, 'log interval'), metavar='<int>',
            help='Log the likelihood every n:th iteration '
                 '(default %(default)s).')


def add_other_arguments(argument_groups):
    # Options for logging
    add_arg = argument_groups.get('logging options')
    add_arg('-v', '--verbose', dest='verbose', type=int, default=1,
            metavar='<int>',
            help='Level of verbosity; controls what is written to '
                 'the standard error stream or log file '
                 '(default %(default)s).')
    add_arg('--logfile', dest='log_file', metavar='<file>',
            help='Write log messages to file in addition to standard '
                 'error stream.')
    add_arg('--progressbar', dest='progress', default=False,
            action='store_true',
            help='Force the progressbar to be displayed.')

    add_arg = argument_groups.get('other options')
    add_arg('-h', '--help', action='help',
            help='Show this help message and exit.')
    add_arg('--version', action='version',
            version='%(prog)s ' + get_version(numeric=True),
            help='Show version number and exit.')


def configure_logging(args):
    if args.verbose >= 2:
        loglevel = logging.DEBUG
    elif args.verbose >= 1:
        loglevel = logging.INFO
    else:
        loglevel = logging.WARNING

    logging_format = '%(asctime)s - %(message)s'
    date_format = '%Y-%m-%d %H:%M:%S'
    default_formatter = logging.Formatter(logging_format, date_format)
    plain_formatter = logging.Formatter('%(message)s')
    logging.basicConfig(level=loglevel)
    package_logger = logging.getLogger(__package__)
    # do not forward messages to the root logger
    package_logger.propagate = False

    # Basic settings for logging to the error stream
    ch = logging.StreamHandler()
    ch.setLevel(loglevel)
    ch.setFormatter(plain_formatter)
    package_logger.addHandler(ch)

    # Settings for when log_file is present
    if args.log_file is not None:
        fh = logging.FileHandler(args.log_file, 'w')
        fh.setLevel(loglevel)
        fh.setFormatter(default_formatter)
        package_logger.addHandler(fh)
        # If logging to a file, make INFO the highest level for the
        # error stream
        ch.setLevel(max(loglevel, logging.INFO))

    # If debug messages are printed to screen or if stderr is not a tty (but
    # a pipe or a file), don't show the progressbar
    if (ch.level > logging.INFO or
            (hasattr(sys.stderr, 'isatty') and not sys.stderr.isatty())):
        utils.show_progress_bar = False

    if args.progress:
        utils.show_progress_bar = True
        ch.setLevel(min(ch.level, logging.INFO))


def build_model(args, word_vocabulary):
    """Creates an untrained model of the type given in args."""
    if args.model_type == 'split':
        return SplitModel(args.alpha_prefix, args.alpha_suffix,
                          word_vocabulary)
    elif args.model_type == 'pss':
        substring_vocabulary = Vocabulary()
        tries = build_substring_index(word_vocabulary, substring_vocabulary)
        return SegmentationModel(args.alpha_prefix,
                                 args.alpha_stem,
                                 args.alpha_suffix,
                                 word_vocabulary,
                                 substring_vocabulary,
                                 tries,
                                 length_alpha=args.length_alpha,
                                 length_beta=args.length_beta)
    raise ArgumentException("unknown model type '%s'" % args.model_type)


def pssmorph_main(args):
    configure_logging(args)

    io = PssMorphIO(encoding=args.encoding,
                    compound_separator=args.cseparator,
                    lowercase=args.lowercase)

    (corpus, word_vocabulary) = io.read_corpus_file(args.infile)
    if len(word_vocabulary) == 0:
        raise ArgumentException(
            "no words found in the corpus '%s'" % args.infile)

    model = build_model(args, word_vocabulary)
    sampler = GibbsSampler(model, corpus,
                           workers=args.workers,
                           seed=args.seed)

    stats = None
    if args.stats_file is not None:
        stats = IterationStatistics()
        stats.register(sampler)

    _logger.info('Sampling {} iterations with {} worker(s)...'.format(
        args.iterations, args.workers))
    sampler.train(args.iterations, log_interval=args.log_interval)
    _logger.info('Final model: {}'.format(model))

    def _format(item):
        (word_id, analysis) = item
        if _logger.isEnabledFor(logging.DEBUG):
            _logger.debug('{}: logprob={}'.format(
                word_vocabulary.convert(word_id),
                model.word_logprob(word_id)))
        return (word_vocabulary.convert(word_id),
                model.format_segmentation(word_id, analysis))

    io.write_segmentation_file(
        args.outfile,
        (_format(item) for item in _generator_progress(sampler.decode())))

    if stats is not None:
        if any(args.stats_file.endswith(ending)
               for ending in BINARY_ENDINGS):
            io.write_binary_file(args.stats_file, stats)
        else:
            io.write_statistics_file(args.stats_file, stats)
