#!/usr/bin/env python
"""
PssMorph - unsupervised prefix, stem and suffix segmentation
of words by collapsed Gibbs sampling
"""
import logging


__all__ = ['PssMorphException', 'ArgumentException', 'PssMorphIO',
           'SegmentationModel', 'SplitModel', 'GibbsSampler',
           'pssmorph_main', 'get_pssmorph_argparser']

__version__ = '0.3.0'
__author__ = 'PssMorph developers'
__author_email__ = "pssmorph@example.org"

_logger = logging.getLogger(__name__)


def get_version(numeric=False):
    if numeric:
        return __version__
    return 'PssMorph {}'.format(__version__)


# The public api imports need to be at the end of the file,
# so that the package global names are available to the modules
# when they are imported.

from .exception import PssMorphException, ArgumentException
from .exception import ContractViolation, InvalidCharacterError
from .grammar import MORPHEME, PREFIX_STEM, STEM_SUFFIX
from .lexicon import Vocabulary, Corpus, build_substring_index
from .model import Segmentation, SegmentationModel, SplitModel
from .sampler import GibbsSampler
from .cmd import pssmorph_main, get_pssmorph_argparser
from .io import PssMorphIO
