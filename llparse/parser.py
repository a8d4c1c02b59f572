from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple, Union

from llparse.diagnostics import DiagnosticSink, get_sink
from llparse.errors import ParseError
from llparse.grammar import Grammar, NonTerminal, Production, Symbol, SyntaxTree, Terminal, Token, make_tokens
from llparse.sets import FirstFollowSets
from llparse.table import ParseTable, build_parse_table


class ParseStatus(Enum):
  RUNNING = 'running'
  ACCEPTED = 'accepted'
  REJECTED = 'rejected'


class SyntaxDiagnostic:
  """
  Why a token stream was rejected. Exactly one of `expected` (terminal mismatch)
  and `no_production_for` (empty table cell, or a cell that makes the parser predict forever) is set.
  """

  def __init__(self, lookahead: Terminal, lexeme: str, position: int,
               expected: Optional[Terminal] = None,
               no_production_for: Optional[NonTerminal] = None,
               expected_terminals: Tuple[Terminal, ...] = (),
               char_pos: Optional[int] = None,
               cycle: bool = False):
    """
    :param lookahead: terminal of the current token
    :param lexeme: lexeme of the current token
    :param position: index of the current token in the token stream
    :param expected: terminal on top of the stack that did not match
    :param no_production_for: non-terminal on top of the stack without a table entry for `lookahead`
    :param expected_terminals: lookaheads that would have been accepted here
    :param char_pos: position of the current token in the source word, if the tokens carry one
    :param cycle: whether `no_production_for` would be predicted again and again without consuming `lookahead`
    """
    assert (expected is None) != (no_production_for is None)
    assert not cycle or no_production_for is not None
    self.lookahead = lookahead
    self.lexeme = lexeme
    self.position = position
    self.expected = expected
    self.no_production_for = no_production_for
    self.expected_terminals = expected_terminals if expected is None else (expected,)
    self.char_pos = char_pos
    self.cycle = cycle

  @property
  def symbol(self) -> Symbol:
    """
    The offending stack symbol.
    """
    return self.expected if self.expected is not None else self.no_production_for

  @property
  def message(self) -> str:
    la_name = 'end of input' if self.lookahead.name == '$' and self.lexeme == '' else '%r token' % self.lookahead.name
    if self.lexeme not in ('', self.lookahead.name):
      la_name += ' (lexeme %r)' % self.lexeme
    if self.expected is not None:
      return 'Unexpected %s at token %s, expected: %r' % (la_name, self.position, self.expected.name)
    if self.cycle:
      return 'Unexpected %s at token %s, %s derives itself without consuming input (left recursion)' % (
        la_name, self.position, self.no_production_for.name)
    return 'Unexpected %s at token %s, no production for %s, expected: %s' % (
      la_name, self.position, self.no_production_for.name,
      ', '.join(['%r' % t.name for t in self.expected_terminals]) or 'nothing')

  def __repr__(self):
    return 'SyntaxDiagnostic[%s]' % self.message

  def __str__(self):
    return self.message


class ParseResult:
  """
  Verdict of one parse. Truthy iff accepted.
  """

  def __init__(self, accepted: bool, error: Optional[SyntaxDiagnostic], analysis: Tuple[Production, ...],
               tokens: Tuple[Token, ...], steps: int):
    """
    :param accepted:
    :param error: set iff not accepted
    :param analysis: productions in the order they were applied, i.e. a left-most analysis
    :param tokens: tokens matched so far, without the end-of-input token
    :param steps: number of automaton steps taken
    """
    assert accepted == (error is None)
    self.accepted = accepted
    self.error = error
    self.analysis = analysis
    self.tokens = tokens
    self.steps = steps

  def __bool__(self):
    return self.accepted

  def __repr__(self):
    if self.accepted:
      return 'ParseResult[accepted, %s productions]' % len(self.analysis)
    return 'ParseResult[rejected: %s]' % self.error

  def raise_for_error(self, word: Optional[str] = None):
    """
    :param word: the source text, to show the error in context
    :raises: ParseError if the parse was rejected
    """
    if self.accepted:
      return
    raise ParseError(self.error.message, word=word, pos=self.error.char_pos)


class ParserState:
  """
  Stack and token cursor of a single parse.
  """

  def __init__(self, table: ParseTable, tokens: Tuple[Token, ...]):
    self.stack: List[Symbol] = [table.end_marker, table.start]
    self.tokens = tokens
    self.pos = 0
    self.status = ParseStatus.RUNNING
    self.error: Optional[SyntaxDiagnostic] = None
    self.analysis: List[Production] = []
    self.steps = 0
    # Non-terminal -> smallest stack size it was predicted at since the last match,
    # for predictions whose stack below is still untouched.
    self.predicted: Dict[NonTerminal, int] = {}
    self._end_token = Token(table.end_marker.name, '', pos=None)

  @property
  def token(self) -> Token:
    """
    Current token, the end-of-input token if the cursor is past the end.
    """
    if self.pos < len(self.tokens):
      return self.tokens[self.pos]
    return self._end_token

  def reject(self, error: SyntaxDiagnostic):
    self.status = ParseStatus.REJECTED
    self.error = error

  def make_result(self) -> ParseResult:
    assert self.status is not ParseStatus.RUNNING
    return ParseResult(
      accepted=self.status is ParseStatus.ACCEPTED, error=self.error, analysis=tuple(self.analysis),
      tokens=self.tokens[:self.pos], steps=self.steps)


class PredictiveParser:
  """
  A table-driven predictive parser. The table is only read, so one parser can parse any number of token streams.
  """

  def __init__(self, table: ParseTable, sink: Optional[DiagnosticSink] = None):
    self.table = table
    self.sink = get_sink(sink)

  @classmethod
  def from_grammar(cls, grammar: Grammar, complete: bool = False, strict: bool = False,
                   sink: Optional[DiagnosticSink] = None) -> PredictiveParser:
    """
    :param grammar:
    :param complete: use the textbook First/Follow closure
    :param strict: fail on table conflicts
    :param sink:
    :raises: TableConflictError
    """
    sets = FirstFollowSets.make(grammar, complete=complete, sink=sink)
    return cls(build_parse_table(grammar, sets=sets, strict=strict, sink=sink), sink=sink)

  def _step(self, state: ParserState):
    top = state.stack[-1]
    token = state.token
    la = Terminal(token.terminal)
    state.steps += 1
    self.sink.emit(
      'trace', 'stack top %s, lookahead %r (lexeme %r)' % (top, la.name, token.lexeme),
      top=top, lookahead=la, lexeme=token.lexeme, position=state.pos)
    if isinstance(top, Terminal):
      if top != la:
        state.reject(SyntaxDiagnostic(
          la, token.lexeme, state.pos, expected=top, char_pos=self._get_char_pos(state)))
        return
      state.stack.pop()
      if top == self.table.end_marker:
        state.status = ParseStatus.ACCEPTED
        return
      self.sink.emit('match', 'matched %r' % token.lexeme, terminal=top, lexeme=token.lexeme, position=state.pos)
      state.pos += 1
      state.predicted.clear()
    else:
      assert isinstance(top, NonTerminal)
      prod = self.table.get(top, la)
      # Predicting `top` again on top of an untouched stack (no match in between) repeats forever.
      cycle = top in state.predicted and len(state.stack) >= state.predicted[top]
      if prod is None or cycle:
        state.reject(SyntaxDiagnostic(
          la, token.lexeme, state.pos, no_production_for=top,
          expected_terminals=self.table.get_expected_terminals(top), char_pos=self._get_char_pos(state), cycle=cycle))
        return
      self.sink.emit('apply', 'applying %s' % prod, production=prod, position=state.pos)
      state.predicted[top] = len(state.stack)
      state.stack.pop()
      for symbol in [x for x, size in state.predicted.items() if size > len(state.stack) + 1]:
        del state.predicted[symbol]
      state.stack.extend(reversed(prod.right))
      state.analysis.append(prod)

  @staticmethod
  def _get_char_pos(state: ParserState) -> Optional[int]:
    if state.token.pos is not None:
      return state.token.pos
    # Past the end: point behind the last token that knows its position.
    last = state.tokens[-1] if len(state.tokens) > 0 else None
    if last is not None and last.pos is not None and state.pos >= len(state.tokens):
      return last.pos + len(last.lexeme)
    return None

  def parse(self, tokens: Iterable[Union[str, Token]]) -> ParseResult:
    """
    Consumes `tokens` left to right and stops at the first error.

    :param tokens: `Token`s, plain terminal names or `(terminal, lexeme)` pairs,
      optionally terminated by the end-of-input token
    :raises: TypeError for any other kind of token
    """
    state = ParserState(self.table, make_tokens(tokens))
    while state.status is ParseStatus.RUNNING:
      self._step(state)
    result = state.make_result()
    if result.accepted:
      self.sink.emit('accept', 'accepted after %s steps' % result.steps, result=result)
    else:
      self.sink.emit('reject', 'Syntax error: %s' % result.error, result=result)
    return result

  def accepts(self, tokens: Iterable[Union[str, Token]]) -> bool:
    return self.parse(tokens).accepted

  def parse_tree(self, tokens: Iterable[Union[str, Token]], word: Optional[str] = None) -> SyntaxTree:
    """
    :param tokens:
    :param word: source text, for the error message
    :raises: ParseError
    """
    result = self.parse(tokens)
    result.raise_for_error(word=word)
    return SyntaxTree.from_left_analysis(result.analysis, tokens=result.tokens)
