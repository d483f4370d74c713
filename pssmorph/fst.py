"""
Weighted finite-state transducers over the log and tropical semirings.

Weights are costs, i.e. negative log-probabilities, in both semirings:
the semirings only differ in how alternative paths are combined.
The log semiring sums the probabilities of the alternatives (used for
sampling), the tropical semiring keeps the cheapest one (used for
Viterbi decoding).

States are integer handles into an arena owned by the Fst. Labels are
strings; the empty string is epsilon.
"""

__all__ = ['Arc', 'Fst', 'LOG', 'TROPICAL', 'EPSILON',
           'compose', 'connect', 'rm_epsilon', 'project_output',
           'topological_order', 'shortest_distance', 'reweight_to_initial',
           'random_path', 'shortest_path', 'path_output', 'linear_chain',
           'unit_weights']

import collections
import logging
import math

from . import utils
from .exception import CyclicAutomatonError

_logger = logging.getLogger(__name__)

EPSILON = ''

Arc = collections.namedtuple('Arc', ['ilabel', 'olabel', 'weight',
                                     'nextstate'])

INFINITY = float('inf')


class LogSemiring(object):
    name = 'log'
    zero = INFINITY
    one = 0.0

    @staticmethod
    def plus(a, b):
        """-log(exp(-a) + exp(-b)), without underflow"""
        if a == INFINITY:
            return b
        if b == INFINITY:
            return a
        if a > b:
            a, b = b, a
        return a - math.log1p(math.exp(a - b))

    @staticmethod
    def times(a, b):
        return a + b

    @staticmethod
    def divide(a, b):
        if a == INFINITY:
            return INFINITY
        return a - b


class TropicalSemiring(object):
    name = 'tropical'
    zero = INFINITY
    one = 0.0

    @staticmethod
    def plus(a, b):
        return min(a, b)

    @staticmethod
    def times(a, b):
        return a + b

    @staticmethod
    def divide(a, b):
        if a == INFINITY:
            return INFINITY
        return a - b


LOG = LogSemiring()
TROPICAL = TropicalSemiring()


class Fst(object):
    """A weighted transducer stored as an arena of states.

    Arguments:
        semiring :  LOG or TROPICAL. Decides how the algorithms
                    combine parallel paths.
    """

    def __init__(self, semiring=LOG):
        self.semiring = semiring
        self.start = None
        self._arcs = []
        self._final = []

    def add_state(self):
        self._arcs.append([])
        self._final.append(self.semiring.zero)
        return len(self._arcs) - 1

    def add_arc(self, state, ilabel, olabel, weight, nextstate):
        self._arcs[state].append(Arc(ilabel, olabel, weight, nextstate))

    def set_start(self, state):
        self.start = state

    def set_final(self, state, weight=None):
        if weight is None:
            weight = self.semiring.one
        self._final[state] = weight

    def final(self, state):
        return self._final[state]

    def is_final(self, state):
        return self._final[state] != self.semiring.zero

    def arcs(self, state):
        return self._arcs[state]

    def states(self):
        return range(len(self._arcs))

    def num_states(self):
        return len(self._arcs)

    def num_arcs(self):
        return sum(len(arcs) for arcs in self._arcs)

    def is_empty(self):
        return self.start is None

    def copy(self, semiring=None):
        """Returns a copy, optionally reinterpreted in another semiring."""
        other = Fst(self.semiring if semiring is None else semiring)
        other.start = self.start
        other._arcs = [list(arcs) for arcs in self._arcs]
        other._final = list(self._final)
        return other

    def __repr__(self):
        return 'Fst({}, states={}, arcs={})'.format(
            self.semiring.name, self.num_states(), self.num_arcs())


def linear_chain(string, semiring=LOG):
    """Straight-line acceptor reading the characters of the string."""
    chain = Fst(semiring)
    state = chain.add_state()
    chain.set_start(state)
    for char in string:
        nextstate = chain.add_state()
        chain.add_arc(state, char, char, semiring.one, nextstate)
        state = nextstate
    chain.set_final(state)
    return chain


def compose(fst1, fst2):
    """Composition matching the output tape of fst1 with the input tape
    of fst2. Only the states reachable from the start are built.

    Epsilon moves are sequenced so that each pair of paths is represented
    once: an epsilon move of fst1 is forbidden directly after an epsilon
    move of fst2.
    """
    semiring = fst1.semiring
    result = Fst(semiring)
    if fst1.is_empty() or fst2.is_empty():
        return result
    index = {}
    queue = collections.deque()

    def state_for(triple):
        if triple not in index:
            index[triple] = result.add_state()
            queue.append(triple)
        return index[triple]

    result.set_start(state_for((fst1.start, fst2.start, 0)))
    while queue:
        triple = queue.popleft()
        (s1, s2, filter_state) = triple
        state = index[triple]
        if fst1.is_final(s1) and fst2.is_final(s2):
            result.set_final(state, semiring.times(fst1.final(s1),
                                                   fst2.final(s2)))
        matching = collections.defaultdict(list)
        for arc2 in fst2.arcs(s2):
            if arc2.ilabel == EPSILON:
                result.add_arc(state, EPSILON, arc2.olabel, arc2.weight,
                               state_for((s1, arc2.nextstate, 1)))
            else:
                matching[arc2.ilabel].append(arc2)
        for arc1 in fst1.arcs(s1):
            if arc1.olabel == EPSILON:
                if filter_state == 0:
                    result.add_arc(state, arc1.ilabel, EPSILON, arc1.weight,
                                   state_for((arc1.nextstate, s2, 0)))
                continue
            for arc2 in matching.get(arc1.olabel, ()):
                result.add_arc(state, arc1.ilabel, arc2.olabel,
                               semiring.times(arc1.weight, arc2.weight),
                               state_for((arc1.nextstate, arc2.nextstate, 0)))
    return result


def _reachable(roots, successors):
    seen = set(roots)
    stack = list(roots)
    while stack:
        state = stack.pop()
        for nextstate in successors(state):
            if nextstate not in seen:
                seen.add(nextstate)
                stack.append(nextstate)
    return seen


def connect(fst):
    """Removes the states that are not on any path from the start
    to a final state. States keep their relative order."""
    result = Fst(fst.semiring)
    if fst.is_empty():
        return result
    accessible = _reachable(
        [fst.start], lambda s: [arc.nextstate for arc in fst.arcs(s)])
    predecessors = collections.defaultdict(list)
    for state in fst.states():
        for arc in fst.arcs(state):
            predecessors[arc.nextstate].append(state)
    coaccessible = _reachable(
        [s for s in fst.states() if fst.is_final(s)],
        lambda s: predecessors[s])
    if fst.start not in coaccessible:
        return result

    mapping = {}
    for state in fst.states():
        if state in accessible and state in coaccessible:
            mapping[state] = result.add_state()
    for (old, new) in mapping.items():
        for arc in fst.arcs(old):
            if arc.nextstate in mapping:
                result.add_arc(new, arc.ilabel, arc.olabel, arc.weight,
                               mapping[arc.nextstate])
        if fst.is_final(old):
            result.set_final(new, fst.final(old))
    result.set_start(mapping[fst.start])
    return result


def topological_order(fst, arc_filter=None, roots=None):
    """Returns the states reachable from roots (default: the start state)
    in topological order.

    Arguments:
        arc_filter :  Only follow arcs for which this returns True.
    Raises:
        CyclicAutomatonError if the followed arcs contain a cycle.
    """
    if roots is None:
        roots = [] if fst.is_empty() else [fst.start]
    order = []
    # 1: on the stack, 2: finished
    status = {}
    for root in roots:
        if root in status:
            continue
        status[root] = 1
        stack = [(root, iter(fst.arcs(root)))]
        while stack:
            (state, arcs) = stack[-1]
            for arc in arcs:
                if arc_filter is not None and not arc_filter(arc):
                    continue
                nextstate = arc.nextstate
                if status.get(nextstate) == 1:
                    raise CyclicAutomatonError(
                        'Cycle through state {}'.format(nextstate))
                if nextstate not in status:
                    status[nextstate] = 1
                    stack.append((nextstate, iter(fst.arcs(nextstate))))
                    break
            else:
                stack.pop()
                status[state] = 2
                order.append(state)
    order.reverse()
    return order


def _is_epsilon(arc):
    return arc.ilabel == EPSILON and arc.olabel == EPSILON


def rm_epsilon(fst):
    """Removes arcs with epsilon on both tapes.

    The weight of every epsilon path is folded into the following
    non-epsilon arc or final weight. Epsilon cycles are not supported.
    """
    semiring = fst.semiring
    result = Fst(semiring)
    if fst.is_empty():
        return result
    for _ in fst.states():
        result.add_state()
    result.set_start(fst.start)
    for state in fst.states():
        closure = collections.OrderedDict()
        closure[state] = semiring.one
        for q in topological_order(fst, _is_epsilon, [state]):
            if q not in closure:
                continue
            for arc in fst.arcs(q):
                if not _is_epsilon(arc):
                    continue
                weight = semiring.times(closure[q], arc.weight)
                if arc.nextstate in closure:
                    weight = semiring.plus(closure[arc.nextstate], weight)
                closure[arc.nextstate] = weight
        final = semiring.zero
        for (q, distance) in closure.items():
            for arc in fst.arcs(q):
                if _is_epsilon(arc):
                    continue
                result.add_arc(state, arc.ilabel, arc.olabel,
                               semiring.times(distance, arc.weight),
                               arc.nextstate)
            if fst.is_final(q):
                final = semiring.plus(final,
                                      semiring.times(distance, fst.final(q)))
        if final != semiring.zero:
            result.set_final(state, final)
    return connect(result)


def project_output(fst):
    """Copies the output labels onto the input tape."""
    result = fst.copy()
    for state in result.states():
        result._arcs[state] = [arc._replace(ilabel=arc.olabel)
                               for arc in result._arcs[state]]
    return result


def unit_weights(fst):
    """Copy with every arc and final weight set to one.
    In the log semiring, the shortest distance of the copy counts paths.
    """
    result = fst.copy()
    one = fst.semiring.one
    for state in result.states():
        result._arcs[state] = [arc._replace(weight=one)
                               for arc in result._arcs[state]]
        if result.is_final(state):
            result.set_final(state, one)
    return result


def shortest_distance(fst, reverse=False):
    """Semiring sum of the weights of all paths of an acyclic fst.

    Returns a list indexed by state: the distance from the start state,
    or with reverse=True the distance to the final states.
    Unreachable states get the semiring zero.
    """
    semiring = fst.semiring
    distance = [semiring.zero] * fst.num_states()
    if fst.is_empty():
        return distance
    order = topological_order(fst)
    if reverse:
        for state in reversed(order):
            d = fst.final(state)
            for arc in fst.arcs(state):
                d = semiring.plus(
                    d, semiring.times(arc.weight, distance[arc.nextstate]))
            distance[state] = d
    else:
        distance[fst.start] = semiring.one
        for state in order:
            for arc in fst.arcs(state):
                distance[arc.nextstate] = semiring.plus(
                    distance[arc.nextstate],
                    semiring.times(distance[state], arc.weight))
    return distance


def reweight_to_initial(fst, potentials):
    """Pushes the weights towards the start state.

    With the reverse shortest distances of the log semiring as potentials,
    the outgoing arc and final weights of every state turn into a
    probability distribution over the next step.
    """
    semiring = fst.semiring
    result = Fst(semiring)
    for _ in fst.states():
        result.add_state()
    result.set_start(fst.start)
    for state in fst.states():
        beta = potentials[state]
        for arc in fst.arcs(state):
            weight = semiring.divide(
                semiring.times(arc.weight, potentials[arc.nextstate]), beta)
            result.add_arc(state, arc.ilabel, arc.olabel, weight,
                           arc.nextstate)
        if fst.is_final(state):
            result.set_final(state, semiring.divide(fst.final(state), beta))
    return result


def random_path(fst, rng):
    """Draws a path from a stochastic fst (see reweight_to_initial).

    At each state, either stops (with the final weight as probability)
    or follows one of the outgoing arcs. Returns the list of arcs taken.
    """
    path = []
    state = fst.start
    while True:
        arcs = fst.arcs(state)
        choice = utils.categorical(
            rng, [fst.final(state)] + [arc.weight for arc in arcs])
        if choice == 0:
            return path
        arc = arcs[choice - 1]
        path.append(arc)
        state = arc.nextstate


def shortest_path(fst):
    """Returns the arcs of the cheapest path from the start to a final
    state, or None if there is no such path.

    Ties are broken at each state by preferring stopping over the arcs,
    and earlier arcs over later ones.
    """
    if fst.is_empty():
        return None
    tropical = fst if fst.semiring is TROPICAL else fst.copy(TROPICAL)
    beta = shortest_distance(tropical, reverse=True)
    if beta[tropical.start] == INFINITY:
        return None
    path = []
    state = tropical.start
    while True:
        arcs = tropical.arcs(state)
        costs = [tropical.final(state)] + [
            arc.weight + beta[arc.nextstate] for arc in arcs]
        (_, choice) = utils.minargmin(costs)
        if choice == 0:
            return path
        arc = arcs[choice - 1]
        path.append(arc)
        state = arc.nextstate


def path_output(path):
    """The non-epsilon output labels along a path."""
    return [arc.olabel for arc in path if arc.olabel != EPSILON]
