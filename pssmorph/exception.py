class PssMorphException(Exception):
    """Base class for exceptions in this module."""
    pass


class ArgumentException(PssMorphException):
    pass


class InvalidCharacterError(PssMorphException):
    def __init__(self, word, character):
        PssMorphException.__init__(
            self,
            'The word "{}" contains the reserved symbol "{}"'.format(
                word, character))
        self.word = word
        self.character = character


class ContractViolation(PssMorphException):
    """Raised when the grammar or the index bookkeeping is inconsistent.
    The count models can not be trusted after this, so the run is aborted.
    """
    pass


class ModelIndexError(ContractViolation, IndexError):
    def __init__(self, index, size):
        ContractViolation.__init__(
            self,
            'Outcome {} is outside the model support [0, {})'.format(
                index, size))


class ModelStateError(ContractViolation):
    pass


class EmptyLatticeError(ContractViolation):
    def __init__(self, word):
        ContractViolation.__init__(
            self,
            'The grammar has no accepting path for the word "{}"'.format(
                word))


class MalformedPathError(ContractViolation):
    def __init__(self, labels, reason):
        ContractViolation.__init__(
            self,
            'Can not read a segmentation from "{}": {}'.format(
                ''.join(labels), reason))


class CyclicAutomatonError(ContractViolation):
    pass
