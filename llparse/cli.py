"""
Command line front end: inspect First/Follow sets, build and save parse tables, parse expression files.
"""
import argparse
from pathlib import Path
from typing import List, Optional

import better_exchook

from llparse.diagnostics import PrintSink
from llparse.errors import LLParseError
from llparse.grammar import NonTerminal
from llparse.grammar_loader import load_grammar_file
from llparse.lexer import MATH_LEXER
from llparse.parser import PredictiveParser
from llparse.sets import FirstFollowSets, dump_sets
from llparse.table import build_parse_table, dump_parse_table, load_parse_table


def _load_grammar(args, sink):
  grammar = load_grammar_file(args.grammar, sink=sink)
  if args.start is not None:
    start = NonTerminal(args.start)
    if start not in grammar.non_terminals:
      raise LLParseError('Start symbol %r is not a non-terminal of %s' % (args.start, args.grammar))
    grammar = grammar.copy_with_start(start)
  return grammar


def _cmd_sets(args, sink) -> int:
  grammar = _load_grammar(args, sink)
  sets = FirstFollowSets.make(grammar, complete=args.complete, sink=sink)
  print('First sets:')
  print(dump_sets(sets.first, grammar.non_terminals), end='')
  print('Follow sets:')
  print(dump_sets(sets.follow, grammar.non_terminals), end='')
  return 0


def _cmd_table(args, sink) -> int:
  grammar = _load_grammar(args, sink)
  sets = FirstFollowSets.make(grammar, complete=args.complete, sink=sink)
  table = build_parse_table(grammar, sets=sets, strict=args.strict, sink=sink)
  for conflict in table.conflicts:
    print('Warning: %s' % conflict)
  if args.output is not None:
    with open(args.output, 'w') as table_file:
      table_file.write(dump_parse_table(table))
    print('Parse table with %s cells saved to %s' % (len(table), args.output))
  else:
    print(dump_parse_table(table), end='')
  return 0


def _cmd_parse(args, sink) -> int:
  if args.table is not None:
    with open(args.table) as table_file:
      table = load_parse_table(table_file.read(), sink=sink)
    parser = PredictiveParser(table, sink=sink)
  else:
    parser = PredictiveParser.from_grammar(_load_grammar(args, sink), complete=args.complete, sink=sink)
  word = Path(args.input).read_text()
  tokens = MATH_LEXER.tokenize(word)
  if args.tokens:
    for token in tokens:
      print('%s\t%r' % (token.terminal, token.lexeme))
  result = parser.parse(tokens)
  result.raise_for_error(word=word)
  print('Parsing completed successfully.')
  return 0


def make_arg_parser() -> argparse.ArgumentParser:
  parser = argparse.ArgumentParser(description='Predictive LL(1) parser generator and driver.')
  parser.add_argument(
    '--verbose', dest='verbose', action='store_true', help='Print full stacktrace for all errors.')
  subparsers = parser.add_subparsers(dest='command', required=True)

  def add_grammar_args(sub, required=True):
    sub.add_argument('--grammar', '-g', required=required, help='Path to grammar file (`A : X Y Z` per line)')
    sub.add_argument('--start', default=None, help='Start non-terminal, by default the first left-hand side')
    sub.add_argument(
      '--complete', action='store_true', help='Compute First/Follow with closure over nullable prefixes.')

  sets_parser = subparsers.add_parser('sets', help='Print First and Follow sets.')
  add_grammar_args(sets_parser)
  sets_parser.set_defaults(func=_cmd_sets)

  table_parser = subparsers.add_parser('table', help='Build the parse table.')
  add_grammar_args(table_parser)
  table_parser.add_argument('--output', '-o', default=None, help='Save table to this file instead of printing it')
  table_parser.add_argument('--strict', action='store_true', help='Fail on conflicts instead of warning.')
  table_parser.set_defaults(func=_cmd_table)

  parse_parser = subparsers.add_parser('parse', help='Tokenize and parse an expression file.')
  add_grammar_args(parse_parser, required=False)
  parse_parser.add_argument('--table', '-t', default=None, help='Path to a saved parse table')
  parse_parser.add_argument('--trace', action='store_true', help='Print every parser step.')
  parse_parser.add_argument('--tokens', action='store_true', help='Print the token stream.')
  parse_parser.add_argument('input', help='Path to input')
  parse_parser.set_defaults(func=_cmd_parse)
  return parser


def main(argv: Optional[List[str]] = None) -> int:
  """
  Main entry point.
  """
  better_exchook.install()
  arg_parser = make_arg_parser()
  args = arg_parser.parse_args(argv)
  if args.command == 'parse' and (args.grammar is None) == (args.table is None):
    arg_parser.error('parse: need exactly one of --grammar and --table')

  trace = getattr(args, 'trace', False)
  sink = PrintSink(kinds={'skipped-line', 'conflict', 'trace', 'match', 'apply'} if trace else {'skipped-line'})
  try:
    return args.func(args, sink)
  except LLParseError as exc:
    if args.verbose:
      raise
    print(str(exc))
    return 1
