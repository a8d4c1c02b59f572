"""
Predictive (LL(1)) parse tables: construction from First/Follow sets, and a tab-separated text format::

  E\tid\tT\tE'
  E'\t+\t+\tT\tE'
  E'\t$

One line per non-empty cell: non-terminal, lookahead terminal, production symbols (none for the epsilon production).
"""
import warnings
from typing import Dict, Iterator, List, Optional, Tuple

from llparse.diagnostics import DiagnosticSink, get_sink
from llparse.errors import GrammarLoadError, TableConflictError, TableConflictWarning
from llparse.grammar import EPSILON, END_OF_INPUT, NonTerminal, Production, Terminal
from llparse.sets import FirstFollowSets


class ParseTable:
  """
  Maps (non-terminal, lookahead terminal) to the production to apply.
  """

  def __init__(self, start: NonTerminal, end_marker: Terminal = END_OF_INPUT):
    self.start = start
    self.end_marker = end_marker
    self._entries: Dict[Tuple[NonTerminal, Terminal], Production] = {}
    self.conflicts: List[TableConflictWarning] = []

  def get(self, non_terminal: NonTerminal, terminal: Terminal) -> Optional[Production]:
    return self._entries.get((non_terminal, terminal))

  def __getitem__(self, key: Tuple[NonTerminal, Terminal]) -> Production:
    return self._entries[key]

  def __contains__(self, key):
    return key in self._entries

  def __len__(self):
    return len(self._entries)

  def __iter__(self) -> Iterator[Tuple[NonTerminal, Terminal]]:
    return iter(self._entries)

  def items(self):
    return self._entries.items()

  def __eq__(self, other):
    if not isinstance(other, ParseTable):
      return False
    return self.start == other.start and self.end_marker == other.end_marker and self._entries == other._entries

  def __repr__(self):
    return 'ParseTable[start=%s, %s cells, %s conflicts]' % (self.start, len(self._entries), len(self.conflicts))

  def _set(self, non_terminal: NonTerminal, terminal: Terminal, prod: Production) -> Optional[Production]:
    """
    :returns: the production previously in the cell, if any
    """
    key = (non_terminal, terminal)
    previous = self._entries.get(key)
    self._entries[key] = prod
    return previous

  @property
  def non_terminals(self) -> Tuple[NonTerminal, ...]:
    """
    Start symbol first, then in order of their first cell.
    """
    non_terminals = dict.fromkeys([self.start] + [non_terminal for non_terminal, _ in self._entries])
    return tuple(non_terminals)

  @property
  def terminals(self) -> Tuple[Terminal, ...]:
    terminals = dict.fromkeys(
      [terminal for _, terminal in self._entries] +
      [x for prod in self._entries.values() for x in prod.right if isinstance(x, Terminal)] + [self.end_marker])
    return tuple(terminals)

  def get_expected_terminals(self, non_terminal: NonTerminal) -> Tuple[Terminal, ...]:
    """
    All lookaheads that have a cell for `non_terminal`, sorted by name.
    """
    return tuple(sorted(terminal for left, terminal in self._entries if left == non_terminal))

  def is_ll1(self) -> bool:
    return len(self.conflicts) == 0


def build_parse_table(grammar,
                      sets: Optional[FirstFollowSets] = None,
                      strict: bool = False,
                      sink: Optional[DiagnosticSink] = None) -> ParseTable:
  """
  For each production `A -> alpha`, put it in every cell (A, t) for t in First(alpha),
  and if alpha can derive the empty word also in every cell (A, t) for t in Follow(A).
  A second production for an occupied cell replaces the first one and is reported as `TableConflictWarning`.

  :param llparse.grammar.Grammar grammar:
  :param sets: First/Follow sets of `grammar`, computed with the default rule if not given
  :param strict: raise `TableConflictError` on the first conflict instead of warning
  :param sink:
  :raises: TableConflictError
  """
  sink = get_sink(sink)
  if sets is None:
    sets = FirstFollowSets.make(grammar, sink=sink)
  assert sets.grammar is grammar
  table = ParseTable(grammar.start, end_marker=grammar.end_marker)

  def add(non_terminal: NonTerminal, terminal: Terminal, prod: Production):
    previous = table._set(non_terminal, terminal, prod)
    if previous is None or previous == prod:
      return
    conflict = TableConflictWarning(non_terminal, terminal, previous=previous, production=prod)
    if strict:
      raise TableConflictError(conflict)
    table.conflicts.append(conflict)
    sink.emit('conflict', str(conflict), conflict=conflict)
    warnings.warn(conflict, stacklevel=3)

  for prod in grammar.prods:
    leading = sets.leading_set(prod)
    has_epsilon = EPSILON in leading
    for terminal in sorted(leading - {EPSILON}):
      add(prod.left, terminal, prod)
    if has_epsilon:
      for terminal in sorted(sets.follow_of(prod.left)):
        add(prod.left, terminal, prod)

  sink.emit(
    'table-built', 'Parse table with %s cells, %s conflicts:\n%s' % (
      len(table), len(table.conflicts), _format_rows(table)), table=table)
  return table


def _format_rows(table: ParseTable) -> str:
  lines = []
  for non_terminal in table.non_terminals:
    for (left, terminal), prod in table.items():
      if left != non_terminal:
        continue
      lines.append('\t'.join([left.name, terminal.name] + [symbol.name for symbol in prod.right]))
  return ''.join('%s\n' % line for line in lines)


def dump_parse_table(table: ParseTable) -> str:
  """
  Rows of the start symbol come first, so that loading recovers it.
  A start symbol without any cell cannot be written, then a warning is issued,
  and loading the text yields another start symbol (or fails if the table is empty).
  """
  if table.start not in [left for left, _ in table]:
    warnings.warn(
      'Start symbol %s has no cell, the dumped table does not record it' % table.start, UserWarning, stacklevel=2)
  return _format_rows(table)


def load_parse_table(text: str,
                     sink: Optional[DiagnosticSink] = None,
                     end_marker: str = '$',
                     epsilon_keyword: str = 'epsilon') -> ParseTable:
  """
  Inverse of `dump_parse_table`. The first line names the start symbol.
  A production written as the single symbol `epsilon_keyword` is read as the epsilon production.

  :raises: GrammarLoadError if no valid line was found
  """
  sink = get_sink(sink)
  rows: List[Tuple[int, List[str]]] = []
  for line_num, line in enumerate(text.splitlines(), start=1):
    parts = line.split()
    if len(parts) == 0:
      continue
    if len(parts) < 2:
      sink.emit('skipped-line', 'line %s: expected non-terminal and terminal: %r' % (line_num, line.strip()),
                line_num=line_num, reason='missing terminal')
      continue
    rows.append((line_num, parts))
  non_terminal_names = {parts[0] for _, parts in rows}

  def make_symbol(name):
    if name in non_terminal_names:
      return NonTerminal(name)
    return Terminal(name)

  table: Optional[ParseTable] = None
  for line_num, parts in rows:
    left, terminal, right = parts[0], parts[1], parts[2:]
    if left == end_marker or terminal in non_terminal_names:
      sink.emit('skipped-line', 'line %s: %r is not a (non-terminal, terminal) cell' % (line_num, ' '.join(parts)),
                line_num=line_num, reason='invalid cell')
      continue
    if right == [epsilon_keyword]:
      right = []
    if table is None:
      table = ParseTable(NonTerminal(left), end_marker=Terminal(end_marker))
    table._set(NonTerminal(left), Terminal(terminal), Production(NonTerminal(left), *[make_symbol(x) for x in right]))
  if table is None:
    raise GrammarLoadError('No valid parse table line found')
  sink.emit('table-loaded', 'loaded parse table with %s cells, start symbol %s' % (len(table), table.start),
            table=table)
  return table
