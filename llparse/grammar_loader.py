"""
Reads grammars written one production per line::

  E : T E'
  E' : + T E'
  E' : epsilon
  T : id

The first left-hand side is the start symbol. Every right-hand side symbol that is never a left-hand side is a terminal.
"""
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from llparse.diagnostics import DiagnosticSink, get_sink
from llparse.errors import GrammarLoadError
from llparse.grammar import Grammar, NonTerminal, Production, Terminal

SEPARATOR = ':'
EPSILON_KEYWORD = 'epsilon'


def _split_line(line, epsilon_keyword, end_marker):
  """
  :param str line:
  :param str epsilon_keyword:
  :param str end_marker:
  :returns: left name + right names, or the reason why the line is malformed
  :rtype: tuple[str, tuple[str]]|str
  """
  parts = line.split()
  if len(parts) < 2 or parts[1] != SEPARATOR:
    if len(parts) >= 1 and parts[0] == SEPARATOR:
      return 'empty left-hand side'
    return 'missing separator %r' % SEPARATOR
  left, right = parts[0], parts[2:]
  if left in (epsilon_keyword, end_marker):
    return 'reserved symbol %r as left-hand side' % left
  if SEPARATOR in right:
    return 'more than one separator %r' % SEPARATOR
  # `epsilon` stands for the empty word, so it can be dropped wherever it appears.
  return left, tuple(symbol for symbol in right if symbol != epsilon_keyword)


def load_grammar(text: str,
                 sink: Optional[DiagnosticSink] = None,
                 epsilon_keyword: str = EPSILON_KEYWORD,
                 end_marker: str = '$') -> Grammar:
  """
  Malformed lines are skipped, each with a ``skipped-line`` diagnostic.

  :param text: grammar source
  :param sink: receives diagnostics
  :param epsilon_keyword: right-hand side keyword for the empty production
  :param end_marker: name of the end-of-input terminal
  :raises: GrammarLoadError if no valid production was read
  """
  sink = get_sink(sink)
  rules: List[Tuple[str, Tuple[str, ...]]] = []
  for line_num, line in enumerate(text.splitlines(), start=1):
    if len(line.strip()) == 0:
      continue
    split = _split_line(line, epsilon_keyword=epsilon_keyword, end_marker=end_marker)
    if isinstance(split, str):
      sink.emit('skipped-line', 'line %s: %s: %r' % (line_num, split, line.strip()), line_num=line_num, reason=split)
      continue
    rules.append(split)

  if len(rules) == 0:
    raise GrammarLoadError('No valid production found')

  non_terminals: Dict[str, NonTerminal] = {left: NonTerminal(left) for left, _ in rules}

  def make_symbol(name: str) -> Union[Terminal, NonTerminal]:
    if name in non_terminals:
      return non_terminals[name]
    return Terminal(name)

  prods = [Production(non_terminals[left], *[make_symbol(name) for name in right]) for left, right in rules]
  grammar = Grammar(*prods, end_marker=Terminal(end_marker))
  if len(grammar.prods) < len(prods):
    sink.emit(
      'duplicate-production', 'dropped %s duplicate production(s)' % (len(prods) - len(grammar.prods)),
      count=len(prods) - len(grammar.prods))
  sink.emit(
    'grammar-loaded', 'loaded %s productions, start symbol %s' % (len(grammar.prods), grammar.start),
    grammar=grammar)
  return grammar


def load_grammar_file(path: Union[str, Path], sink: Optional[DiagnosticSink] = None, **kwargs) -> Grammar:
  """
  :param path: file in the format of `load_grammar`
  :param sink:
  :param kwargs: passed on to `load_grammar`
  """
  with open(path) as grammar_file:
    text = grammar_file.read()
  return load_grammar(text, sink=sink, **kwargs)
