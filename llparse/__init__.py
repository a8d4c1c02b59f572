"""
Grammar-driven predictive (LL(1)) parsing: load a grammar, compute First/Follow sets,
build a parse table and run the table-driven parser over token streams.
"""
from llparse.diagnostics import DiagnosticEvent, DiagnosticSink, NullSink, CollectingSink, PrintSink
from llparse.errors import LLParseError, GrammarLoadError, TableConflictWarning, TableConflictError, LexError, \
  ParseError
from llparse.grammar import EPSILON, END_OF_INPUT, Symbol, Terminal, NonTerminal, Token, Production, Grammar, \
  SyntaxTree
from llparse.grammar_loader import load_grammar, load_grammar_file
from llparse.sets import FirstFollowSets, make_first_sets, make_follow_sets
from llparse.table import ParseTable, build_parse_table, dump_parse_table, load_parse_table
from llparse.parser import PredictiveParser, ParseResult, SyntaxDiagnostic, ParseStatus
from llparse.lexer import Lexer, MATH_LEXER
