"""
First and Follow sets, computed by monotone fixed-point iteration.

By default only the first symbol of a production is inspected: a production whose first symbol is nullable does
not continue into the First set of its second symbol, and Follow only looks one symbol ahead.
Pass ``complete=True`` for the textbook closure over nullable prefixes.
"""
from typing import Dict, Iterable, Optional, Set

from llparse.diagnostics import DiagnosticSink, get_sink
from llparse.errors import GrammarLoadError
from llparse.grammar import EPSILON, NonTerminal, Production, Symbol, Terminal

FirstSets = Dict[NonTerminal, Set[Optional[Terminal]]]
FollowSets = Dict[NonTerminal, Set[Terminal]]


def get_first_set_for_symbol(first_sets, symbol):
  """
  :param FirstSets first_sets:
  :param Symbol symbol:
  :rtype: set[Terminal|None]
  """
  if isinstance(symbol, Terminal):
    return {symbol}
  return first_sets.get(symbol, set())


def get_first_set_for_word(first_sets, word):
  """
  :param FirstSets first_sets:
  :param tuple[Symbol] word:
  :rtype: set[Terminal|None]
  """
  first = set()
  for right_symbol in word:
    # add all fi(X_{i+1}) to fi(A)
    symbol_first = get_first_set_for_symbol(first_sets, right_symbol)
    first.update(symbol_first - {EPSILON})
    if EPSILON not in symbol_first:
      break
  # if A -> X1 ... Xn, and EPSILON in fi(X1),...,fi(Xn), then EPSILON in fi(A)
  if all(EPSILON in get_first_set_for_symbol(first_sets, right) for right in word):
    first.add(EPSILON)
  return first


def get_leading_set(first_sets, prod, complete=False):
  """
  The terminals a production can start with, plus EPSILON if it can derive the empty word.

  :param FirstSets first_sets:
  :param Production prod:
  :param bool complete: whether to look past a nullable first symbol
  :rtype: set[Terminal|None]
  """
  if complete or prod.is_epsilon:
    return get_first_set_for_word(first_sets, prod.right)
  return set(get_first_set_for_symbol(first_sets, prod.right[0]))


def update_first_sets(grammar, first_sets, complete=False):
  """
  One pass over all productions.

  :param llparse.grammar.Grammar grammar:
  :param FirstSets first_sets: updated in place, sets only grow
  :param bool complete:
  :returns: whether any set changed
  :rtype: bool
  """
  changes = False
  for symbol in grammar.non_terminals:
    first = set(first_sets[symbol])
    for prod in grammar.get_prods_for(symbol):
      if prod.is_epsilon:
        first.add(EPSILON)
      elif complete:
        first.update(get_first_set_for_word(first_sets, prod.right))
      else:
        first.update(get_first_set_for_symbol(first_sets, prod.right[0]) - {EPSILON})
    if first != first_sets[symbol]:
      first_sets[symbol] = first
      changes = True
  return changes


def make_first_sets(grammar, complete=False):
  """
  :param llparse.grammar.Grammar grammar:
  :param bool complete:
  :rtype: FirstSets
  """
  first_sets: FirstSets = {symbol: set() for symbol in grammar.non_terminals}
  while update_first_sets(grammar, first_sets, complete=complete):
    pass
  assert all(all(x in grammar.terminals or x is EPSILON for x in first) for first in first_sets.values())
  return first_sets


def update_follow_sets(grammar, first_sets, follow_sets, complete=False):
  """
  One pass over every occurrence of every non-terminal in every production.

  :param llparse.grammar.Grammar grammar:
  :param FirstSets first_sets: converged First sets
  :param FollowSets follow_sets: updated in place, sets only grow
  :param bool complete:
  :returns: whether any set changed
  :rtype: bool
  """
  changes = False
  for prod in grammar.prods:
    for pos, symbol in enumerate(prod.right):
      if not isinstance(symbol, NonTerminal):
        continue
      rest = prod.right[pos + 1:]
      if complete:
        rest_first = get_first_set_for_word(first_sets, rest)
      elif len(rest) == 0:
        rest_first = {EPSILON}
      else:
        rest_first = get_first_set_for_symbol(first_sets, rest[0])
      follow = rest_first - {EPSILON}
      if EPSILON in rest_first:
        follow |= follow_sets[prod.left]
      if not follow <= follow_sets[symbol]:
        follow_sets[symbol] |= follow
        changes = True
  return changes


def make_follow_sets(grammar, first_sets, complete=False):
  """
  :param llparse.grammar.Grammar grammar:
  :param FirstSets first_sets:
  :param bool complete:
  :rtype: FollowSets
  """
  follow_sets: FollowSets = {symbol: set() for symbol in grammar.non_terminals}
  follow_sets[grammar.start].add(grammar.end_marker)
  while update_follow_sets(grammar, first_sets, follow_sets, complete=complete):
    pass
  return follow_sets


class FirstFollowSets:
  """
  First and Follow sets of a grammar. Read-only once made.
  """

  def __init__(self, grammar, first, follow, complete=False):
    """
    :param llparse.grammar.Grammar grammar:
    :param FirstSets first:
    :param FollowSets follow:
    :param bool complete: which First/Follow rule the sets were computed with
    """
    self.grammar = grammar
    self.first = first
    self.follow = follow
    self.complete = complete

  @classmethod
  def make(cls, grammar, complete=False, sink: Optional[DiagnosticSink] = None):
    """
    :param llparse.grammar.Grammar grammar:
    :param bool complete:
    :param sink:
    :rtype: FirstFollowSets
    """
    sink = get_sink(sink)
    first = make_first_sets(grammar, complete=complete)
    sink.emit('first-sets', 'First sets:\n%s' % dump_sets(first, grammar.non_terminals), sets=first)
    follow = make_follow_sets(grammar, first, complete=complete)
    sink.emit('follow-sets', 'Follow sets:\n%s' % dump_sets(follow, grammar.non_terminals), sets=follow)
    return cls(grammar, first, follow, complete=complete)

  def first_of(self, symbol: Symbol) -> Set[Optional[Terminal]]:
    return set(get_first_set_for_symbol(self.first, symbol))

  def follow_of(self, symbol: NonTerminal) -> Set[Terminal]:
    return set(self.follow[symbol])

  def leading_set(self, prod: Production) -> Set[Optional[Terminal]]:
    return get_leading_set(self.first, prod, complete=self.complete)

  def is_nullable(self, symbol: NonTerminal) -> bool:
    return EPSILON in self.first[symbol]

  def is_fixed_point(self) -> bool:
    """
    Whether another pass would change no set.
    """
    first = {symbol: set(first) for symbol, first in self.first.items()}
    follow = {symbol: set(follow) for symbol, follow in self.follow.items()}
    return (
      not update_first_sets(self.grammar, first, complete=self.complete) and
      not update_follow_sets(self.grammar, first, follow, complete=self.complete))


def _format_set(symbols, epsilon_keyword):
  names = sorted(epsilon_keyword if symbol is EPSILON else symbol.name for symbol in symbols)
  return ' '.join(names)


def dump_sets(sets, order: Optional[Iterable[NonTerminal]] = None, epsilon_keyword: str = 'epsilon') -> str:
  """
  One line per non-terminal: ``NonTerminal symbol*``, symbols sorted by name.

  :param FirstSets|FollowSets sets:
  :param order: non-terminals in output order, by default sorted by name
  :param epsilon_keyword: how to write EPSILON
  """
  if order is None:
    order = sorted(sets.keys())
  return ''.join(
    '%s\n' % ' '.join([symbol.name] + ([_format_set(sets[symbol], epsilon_keyword)] if sets[symbol] else []))
    for symbol in order)


def load_sets(text: str, epsilon_keyword: str = 'epsilon') -> Dict[NonTerminal, Set[Optional[Terminal]]]:
  """
  Inverse of `dump_sets`. Line heads are non-terminals, all other names are terminals.

  :raises: GrammarLoadError if the text has no line
  """
  sets: Dict[NonTerminal, Set[Optional[Terminal]]] = {}
  for line in text.splitlines():
    parts = line.split()
    if len(parts) == 0:
      continue
    sets.setdefault(NonTerminal(parts[0]), set()).update(
      EPSILON if name == epsilon_keyword else Terminal(name) for name in parts[1:])
  if len(sets) == 0:
    raise GrammarLoadError('No sets found')
  return sets
