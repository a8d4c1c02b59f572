from typing import Dict, Optional, Tuple


class LLParseError(Exception):
  def __init__(self, message: str):
    super(LLParseError, self).__init__(message)


def get_line_col_from_pos(word: str, pos: int, num_context_lines: int = 2) -> Tuple[int, int, Dict[int, str]]:
  """
  :returns: line and column of `pos` (both counting from 1), and the lines around it by line number
  """
  assert 0 <= pos <= len(word)
  word_lines = word.split('\n')
  line_num = word.count('\n', 0, pos)
  col_num = pos - (word.rfind('\n', 0, pos) + 1)
  context_lines = {
    context_line_num + 1: word_lines[context_line_num]
    for context_line_num in range(
      max(0, line_num - num_context_lines), min(len(word_lines), line_num + num_context_lines + 1))}
  return line_num + 1, col_num + 1, context_lines


def make_error_message(word: str, pos: int, error_name: str, message: str) -> str:
  line_num_pad_size = 3
  line, col, context_lines = get_line_col_from_pos(word, pos)
  assert line in context_lines
  return '%s on line %s:%s\n\n' % (error_name, line, col) + '\n'.join([
    ('%0' + str(line_num_pad_size) + 'i: %s%s') % (
      context_line_num, context_line,
      ('\n' + (' ' * (col - 1 + line_num_pad_size + 2)) + '^') if context_line_num == line else '')
    for context_line_num, context_line in context_lines.items()]
  ) + '\n\n' + message


class GrammarLoadError(LLParseError):
  """
  A grammar (or a serialized parse table) could not be turned into a usable model.
  """

  def __init__(self, message: str, line_num: Optional[int] = None):
    """
    :param message:
    :param line_num: 1-based line of the grammar text, if the error belongs to a single line
    """
    self.line_num = line_num
    if line_num is not None:
      message = 'line %s: %s' % (line_num, message)
    super().__init__(message)


class TableConflictWarning(UserWarning):
  """
  Two productions compete for the same parse table cell.
  Construction goes on with the later production.
  """

  def __init__(self, non_terminal, terminal, previous, production):
    """
    :param llparse.grammar.NonTerminal non_terminal:
    :param llparse.grammar.Terminal terminal:
    :param llparse.grammar.Production previous: production that was in the cell before
    :param llparse.grammar.Production production: production that now holds the cell
    """
    self.non_terminal = non_terminal
    self.terminal = terminal
    self.previous = previous
    self.production = production
    super().__init__(
      'Grammar not LL(1)! Conflict at [%s, %s]: %s replaced by %s' % (non_terminal, terminal, previous, production))

  def __eq__(self, other):
    if not isinstance(other, TableConflictWarning):
      return False
    return (
      self.non_terminal == other.non_terminal and self.terminal == other.terminal and
      self.previous == other.previous and self.production == other.production)

  def __hash__(self):
    return hash((self.non_terminal, self.terminal, self.previous, self.production))


class TableConflictError(LLParseError):
  """
  Raised instead of a `TableConflictWarning` when the table is built in strict mode.
  """

  def __init__(self, conflict: TableConflictWarning):
    self.conflict = conflict
    super().__init__(str(conflict))


class LexError(LLParseError):
  """
  A lexical error, when a word is not recognized (does not have a first-longest-match analysis).
  """

  def __init__(self, word, pos, message):
    """
    :param str word:
    :param int pos:
    :param str message:
    """
    self.pos = pos
    super().__init__(make_error_message(word, pos, error_name='Lexical error', message=message))


class ParseError(LLParseError):
  """
  A parse error, when a token stream is not recognized by the grammar.
  """

  def __init__(self, message, word=None, pos=None):
    """
    :param str message:
    :param str|None word: source text the tokens were read from, if known
    :param int|None pos: word position where error occurred
    """
    self.pos = pos
    if word is not None and pos is not None:
      message = make_error_message(word, pos, error_name='Parse error', message=message)
    super().__init__(message)
