import re
from typing import Dict, List, Optional, Pattern, Tuple

from llparse.errors import LexError
from llparse.grammar import Token

IGNORED_TOKEN = None


class Lexer:
  """
  Splits a word into tokens by first-longest-match over a list of regular expressions.
  """

  def __init__(self, token_names: List[Optional[str]], token_regex_table: List[str],
               terminal_map: Optional[Dict[str, str]] = None, end_marker: str = '$'):
    """
    :param token_names: list of token class names, sorted by priority.
      Tokens with name `IGNORED_TOKEN` are dropped (e.g. for whitespace, comments, etc.).
    :param token_regex_table: corresponding regex's, not recognizing the empty word.
    :param terminal_map: grammar terminal for each token class, by default the token class itself
    :param end_marker: terminal of the token appended at the end
    """
    assert len(token_names) == len(token_regex_table)
    self.token_names = token_names
    self.token_regex_table = token_regex_table
    self.terminal_map: Dict[str, str] = dict(terminal_map) if terminal_map is not None else {}
    self.end_marker = end_marker
    self._patterns: List[Pattern] = [re.compile(regex) for regex in token_regex_table]
    assert all(pattern.fullmatch('') is None for pattern in self._patterns), (
      'all regex must not recognize the empty word')

  @classmethod
  def from_dict(cls, token_names_to_regex: Dict[str, str], ignore_token_regexes: List[str],
                terminal_map: Optional[Dict[str, str]] = None, end_marker: str = '$'):
    """
    :param token_names_to_regex: pairs token name -> regex. highest priority first
    :param ignore_token_regexes: regexes for tokens to ignore, will have lower priority than other tokens
    :param terminal_map:
    :param end_marker:
    """
    assert None not in token_names_to_regex
    token_names = list(token_names_to_regex.keys()) + [IGNORED_TOKEN] * len(ignore_token_regexes)
    token_regex_table = list(token_names_to_regex.values()) + ignore_token_regexes
    return Lexer(
      token_names=token_names, token_regex_table=token_regex_table, terminal_map=terminal_map, end_marker=end_marker)

  def get_terminal(self, token_name: str) -> str:
    return self.terminal_map.get(token_name, token_name)

  def _match(self, word: str, pos: int) -> Optional[Tuple[Optional[str], int]]:
    """
    :returns: token name and end position of the longest match at `pos`, earlier regex wins ties
    """
    best: Optional[Tuple[Optional[str], int]] = None
    for token_name, pattern in zip(self.token_names, self._patterns):
      match = pattern.match(word, pos)
      if match is None or match.end() == pos:
        continue
      if best is None or match.end() > best[1]:
        best = token_name, match.end()
    return best

  def tokenize(self, word: str) -> Tuple[Token, ...]:
    """
    Find first longest matching analysis.
    :returns: tokens, terminated by the end-of-input token
    :raises: LexError
    """
    tokens: List[Token] = []
    pos = 0
    while pos < len(word):
      match = self._match(word, pos)
      if match is None:
        raise LexError(word, pos, 'Unexpected character %r' % word[pos])
      token_name, end_pos = match
      if token_name is not IGNORED_TOKEN:
        tokens.append(Token(self.get_terminal(token_name), word[pos:end_pos], pos=pos))
      pos = end_pos
    tokens.append(Token(self.end_marker, '', pos=len(word)))
    return tuple(tokens)


MATH_LEXER = Lexer.from_dict(
  {
    'ID': '[A-Za-z_][A-Za-z0-9_]*',
    'NUMBER': '[0-9]+(\\.[0-9]+)?',
    'PLUS': '\\+', 'MINUS': '-', 'TIMES': '\\*', 'DIVIDE': '/',
    'LPAREN': '\\(', 'RPAREN': '\\)'
  },
  ignore_token_regexes=['\\s+'],
  terminal_map={
    'ID': 'id', 'NUMBER': 'id',
    'PLUS': '+', 'MINUS': '-', 'TIMES': '*', 'DIVIDE': '/',
    'LPAREN': '(', 'RPAREN': ')'
  })
