"""
Grammar model.
`EPSILON` is the empty symbol (!= the empty word), the empty word is the empty tuple.
"""
from __future__ import annotations

from typing import Dict, Iterable, Optional, Tuple, Union

from llparse.errors import GrammarLoadError

EPSILON = None


class Symbol:
  """
  A grammar symbol. Either a `Terminal` or a `NonTerminal`, two symbols are equal iff both tag and name are.
  """

  __slots__ = ('name',)
  is_terminal = False

  def __init__(self, name: str):
    assert isinstance(name, str) and len(name) > 0
    assert not any(char.isspace() for char in name), 'symbol names must not contain whitespace: %r' % name
    self.name = name

  def __eq__(self, other):
    if not isinstance(other, Symbol):
      return False
    return self.is_terminal == other.is_terminal and self.name == other.name

  def __hash__(self):
    return hash((self.is_terminal, self.name))

  def __lt__(self, other):
    assert isinstance(other, Symbol)
    return (self.is_terminal, self.name) < (other.is_terminal, other.name)

  def __repr__(self):
    return '%s(%r)' % (self.__class__.__name__, self.name)

  def __str__(self):
    return self.name


class Terminal(Symbol):
  __slots__ = ()
  is_terminal = True


class NonTerminal(Symbol):
  __slots__ = ()
  is_terminal = False


END_OF_INPUT = Terminal('$')


class Token:
  """
  A token of the token stream: the grammar terminal it is classified as, plus its lexeme.
  """

  __slots__ = ('terminal', 'lexeme', 'pos')

  def __init__(self, terminal: str, lexeme: Optional[str] = None, pos: Optional[int] = None):
    """
    :param terminal: name of the grammar terminal, e.g. ``id`` for both identifiers and numbers
    :param lexeme: the matched text, by default the terminal name
    :param pos: start index of the lexeme in the source word, if known
    """
    self.terminal = terminal
    self.lexeme = terminal if lexeme is None else lexeme
    self.pos = pos

  def __eq__(self, other):
    if not isinstance(other, Token):
      return False
    return self.terminal == other.terminal and self.lexeme == other.lexeme and self.pos == other.pos

  def __hash__(self):
    return hash((self.terminal, self.lexeme, self.pos))

  def __repr__(self):
    if self.pos is None:
      return 'Token(%r, %r)' % (self.terminal, self.lexeme)
    return 'Token(%r, %r, pos=%r)' % (self.terminal, self.lexeme, self.pos)


def _make_token(token) -> Token:
  if isinstance(token, Token):
    return token
  if isinstance(token, str) and len(token) > 0:
    return Token(token)
  if isinstance(token, tuple) and len(token) == 2 and all(isinstance(x, str) for x in token) and len(token[0]) > 0:
    return Token(*token)
  raise TypeError('Expected a Token, a terminal name or a (terminal, lexeme) pair, got %r' % (token,))


def make_tokens(tokens: Iterable[Union[str, Tuple[str, str], Token]]) -> Tuple[Token, ...]:
  """
  Plain strings are taken as terminal names whose lexeme is the name itself,
  pairs as ``(terminal, lexeme)`` records.

  :raises: TypeError for anything else
  """
  return tuple(_make_token(token) for token in tokens)


class Production:
  """
  A production A -> X_1 X_2 ... X_n. The empty production (n = 0) is the epsilon production.
  """

  def __init__(self, left, *right):
    """
    :param NonTerminal left: A
    :param Symbol right: X_1 ... X_n
    """
    assert isinstance(left, NonTerminal)
    assert all(isinstance(symbol, Symbol) for symbol in right)
    self.left = left
    self.right: Tuple[Symbol, ...] = tuple(right)

  @property
  def is_epsilon(self) -> bool:
    return len(self.right) == 0

  def __repr__(self):
    return 'Production[%s -> %s]' % (self.left, ' '.join([str(symbol) for symbol in self.right]))

  def __str__(self):
    return '%s -> %s' % (self.left, ' '.join([str(symbol) for symbol in self.right]) if self.right else 'epsilon')

  def __hash__(self):
    return hash((self.left, self.right))

  def __eq__(self, other):
    if not isinstance(other, Production):
      return False
    return self.left == other.left and self.right == other.right


class Grammar:
  """
  A context free grammar. Never mutated after construction.
  """

  def __init__(self, *prods, start=None, end_marker=END_OF_INPUT):
    """
    :param Production prods: in the order they were read, duplicates are dropped
    :param None|NonTerminal start: start non-terminal, by default left of first production
    :param Terminal end_marker: always part of the terminals
    :raises: GrammarLoadError
    """
    unique_prods: Dict[Production, None] = dict.fromkeys(prods)
    self.prods: Tuple[Production, ...] = tuple(unique_prods)
    if len(self.prods) == 0:
      raise GrammarLoadError('Grammar has no productions')
    if start is None:
      start = self.prods[0].left
    self.start: NonTerminal = start
    self.end_marker: Terminal = end_marker

    non_terminals: Dict[NonTerminal, None] = dict.fromkeys(p.left for p in self.prods)
    terminals: Dict[Terminal, None] = dict.fromkeys(
      x for p in self.prods for x in p.right if isinstance(x, Terminal))
    terminals[end_marker] = None
    self.non_terminals: Tuple[NonTerminal, ...] = tuple(non_terminals)
    self.terminals: Tuple[Terminal, ...] = tuple(terminals)
    self.symbols: Tuple[Symbol, ...] = self.non_terminals + self.terminals
    self._prods_by_left = {left: tuple([p for p in self.prods if p.left == left]) for left in self.non_terminals}
    self._check()

  def _check(self):
    """
    :raises: GrammarLoadError
    """
    if self.start not in self._prods_by_left:
      raise GrammarLoadError('Start symbol %s has no productions' % self.start)
    clashes = {t.name for t in self.terminals} & {n.name for n in self.non_terminals}
    if len(clashes) > 0:
      raise GrammarLoadError('Symbols used both as terminal and non-terminal: %s' % ', '.join(sorted(clashes)))
    for prod in self.prods:
      undefined = [x for x in prod.right if isinstance(x, NonTerminal) and x not in self._prods_by_left]
      if len(undefined) > 0:
        raise GrammarLoadError('%s: non-terminal %s has no productions' % (prod, undefined[0]))

  def get_prods_for(self, left):
    """
    :param NonTerminal left: left-hand non-terminal of production
    :rtype: tuple[Production]
    """
    assert left in self._prods_by_left
    return self._prods_by_left[left]

  def get_symbol(self, name: str) -> Optional[Symbol]:
    """
    :returns: the non-terminal or terminal with this name, if any
    """
    for symbol in self.symbols:
      if symbol.name == name:
        return symbol
    return None

  def copy_with_start(self, start):
    """
    :param NonTerminal start: new start non-terminal symbol
    :rtype: Grammar
    """
    if start == self.start:
      return self
    assert start in self.non_terminals
    return Grammar(*self.prods, start=start, end_marker=self.end_marker)

  def __str__(self):
    return '\n'.join(
      '%s : %s' % (p.left, ' '.join(str(x) for x in p.right) if p.right else 'epsilon') for p in self.prods)


class SyntaxTree:
  """
  Simple (non-abstract, i.e. for each Production right side one child) syntax tree.
  """

  def __init__(self, prod, *right):
    """
    :param Production prod: production
    :param SyntaxTree|Token|None right: trees corresponding to prod.right, tokens (or None) for terminals
    """
    assert len(prod.right) == len(right)
    assert all(
      (isinstance(subtree, SyntaxTree) and subtree.left == symbol) if isinstance(symbol, NonTerminal)
      else not isinstance(subtree, SyntaxTree)
      for subtree, symbol in zip(right, prod.right))
    self.prod = prod
    self.right: Tuple[Union[SyntaxTree, Token, None], ...] = right

  @property
  def left(self):
    """
    :rtype: NonTerminal
    """
    return self.prod.left

  @classmethod
  def from_left_analysis(cls, analysis, tokens=None):
    """
    :param list[Production]|tuple[Production] analysis: productions in the order a left-most derivation applies them
    :param list[Token]|tuple[Token]|None tokens: matched tokens, put in place of the terminal leaves
    :rtype: SyntaxTree
    """
    prods = iter(analysis)
    leaves = iter(tokens) if tokens is not None else None

    def make_tree():
      prod = next(prods)
      return cls(prod, *[
        make_tree() if isinstance(symbol, NonTerminal) else (next(leaves) if leaves is not None else None)
        for symbol in prod.right])

    tree = make_tree()
    assert next(prods, None) is None, 'analysis has more productions than the derivation uses'
    return tree

  def __repr__(self):
    return 'SyntaxTree[%s -> %s]' % (
      self.left, ' '.join([
        str(symbol) if not isinstance(subtree, SyntaxTree) else repr(subtree)
        for symbol, subtree in zip(self.prod.right, self.right)]))

  def __hash__(self):
    return hash((self.prod, self.right))

  def __eq__(self, other):
    if not isinstance(other, SyntaxTree):
      return False
    return self.prod == other.prod and self.right == other.right

  def get_left_analysis(self):
    """
    :rtype: tuple[Production]
    """
    return (self.prod,) + tuple(
      prod for subtree in self.right if isinstance(subtree, SyntaxTree) for prod in subtree.get_left_analysis())

  def get_leaves(self):
    """
    :rtype: tuple[Token|None]
    :returns: terminal leaves from left to right
    """
    return tuple(
      leaf for subtree, symbol in zip(self.right, self.prod.right)
      for leaf in (subtree.get_leaves() if isinstance(symbol, NonTerminal) else (subtree,)))
