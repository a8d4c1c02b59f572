import _setup_test_env  # noqa
import sys
import tempfile
import unittest
from pathlib import Path
import better_exchook
import pytest

from llparse.diagnostics import CollectingSink
from llparse.errors import GrammarLoadError
from llparse.grammar import END_OF_INPUT, Grammar, NonTerminal, Production, SyntaxTree, Terminal, Token
from llparse.grammar_loader import load_grammar, load_grammar_file

EXPR_GRAMMAR = """
E : T E'
E' : + T E'
E' : epsilon
T : id
"""


def test_Symbol():
  assert Terminal('a') == Terminal('a')
  assert Terminal('a') != NonTerminal('a')
  assert len({Terminal('a'), NonTerminal('a'), Terminal('a')}) == 2
  assert END_OF_INPUT == Terminal('$')
  assert sorted([Terminal('b'), NonTerminal('X'), Terminal('a')]) == [NonTerminal('X'), Terminal('a'), Terminal('b')]


def test_Grammar():
  S, A = NonTerminal('S'), NonTerminal('A')
  a, b = Terminal('a'), Terminal('b')
  g = Grammar(
    Production(S, A, b),
    Production(A, a, a),
    Production(A)
  )
  assert g.start == S
  assert g.non_terminals == (S, A)
  assert g.terminals == (b, a, END_OF_INPUT)
  assert set(g.symbols) == {S, A, a, b, END_OF_INPUT}
  assert g.get_prods_for(A) == (g.prods[1], g.prods[2])
  assert g.prods[2].is_epsilon
  assert str(g.prods[2]) == 'A -> epsilon'
  assert g.get_symbol('a') == a
  assert g.get_symbol('c') is None


def test_Grammar_invalid():
  S, X = NonTerminal('S'), NonTerminal('X')
  with pytest.raises(GrammarLoadError):
    Grammar()
  with pytest.raises(GrammarLoadError):
    Grammar(Production(S, X))
  with pytest.raises(GrammarLoadError):
    Grammar(Production(S, Terminal('S')))
  with pytest.raises(GrammarLoadError):
    Grammar(Production(S, Terminal('a')), start=X)


def test_Grammar_copy_with_start():
  g = load_grammar(EXPR_GRAMMAR)
  assert g.copy_with_start(g.start) is g
  g2 = g.copy_with_start(NonTerminal('T'))
  assert g2.start == NonTerminal('T')
  assert g2.prods == g.prods


def test_load_grammar():
  sink = CollectingSink()
  g = load_grammar(EXPR_GRAMMAR, sink=sink)
  E, E2, T = NonTerminal('E'), NonTerminal("E'"), NonTerminal('T')
  assert g.start == E
  assert g.non_terminals == (E, E2, T)
  assert g.terminals == (Terminal('+'), Terminal('id'), END_OF_INPUT)
  assert g.prods == (
    Production(E, T, E2),
    Production(E2, Terminal('+'), T, E2),
    Production(E2),
    Production(T, Terminal('id')))
  assert sink.kinds() == ['grammar-loaded']
  assert sink.events[0]['grammar'] is g


def test_load_grammar_skips_malformed_lines():
  sink = CollectingSink()
  g = load_grammar('S A b\n: a\n\nS : A b\nA : a :\nA : a\nA :\n', sink=sink)
  skipped = sink.of_kind('skipped-line')
  assert [event['line_num'] for event in skipped] == [1, 2, 5]
  assert skipped[1]['reason'] == 'empty left-hand side'
  assert g.start == NonTerminal('S')
  assert len(g.prods) == 3
  assert g.prods[2].is_epsilon


def test_load_grammar_epsilon_keyword():
  g = load_grammar('S : a epsilon b\nS : epsilon\n')
  assert g.prods[0].right == (Terminal('a'), Terminal('b'))
  assert g.prods[1].is_epsilon
  g = load_grammar('S : a\nS : nil\n', epsilon_keyword='nil')
  assert g.prods[1].is_epsilon


def test_load_grammar_end_marker():
  g = load_grammar('S : a $\n', end_marker='$')
  assert g.prods[0].right == (Terminal('a'), END_OF_INPUT)
  assert g.terminals == (Terminal('a'), END_OF_INPUT)
  g = load_grammar('S : a\n', end_marker='EOF')
  assert g.end_marker == Terminal('EOF')
  assert Terminal('EOF') in g.terminals


def test_load_grammar_duplicates():
  sink = CollectingSink()
  g = load_grammar('S : a\nS : a\n', sink=sink)
  assert len(g.prods) == 1
  assert sink.of_kind('duplicate-production')[0]['count'] == 1


def test_load_grammar_no_production():
  with pytest.raises(GrammarLoadError):
    load_grammar('')
  sink = CollectingSink()
  with pytest.raises(GrammarLoadError):
    load_grammar('just some words\n$ : a\n', sink=sink)
  assert len(sink.of_kind('skipped-line')) == 2


def test_load_grammar_file():
  with tempfile.TemporaryDirectory() as tmp_dir:
    path = Path(tmp_dir) / 'grammar.txt'
    path.write_text(EXPR_GRAMMAR)
    assert load_grammar_file(path).prods == load_grammar(EXPR_GRAMMAR).prods
    assert load_grammar_file(str(path)).start == NonTerminal('E')


def test_SyntaxTree_from_left_analysis():
  g = load_grammar(EXPR_GRAMMAR)
  analysis = (g.prods[0], g.prods[3], g.prods[1], g.prods[3], g.prods[2])
  tokens = (Token('id', 'a'), Token('+'), Token('id', 'b'))
  tree = SyntaxTree.from_left_analysis(analysis, tokens=tokens)
  assert tree.prod == g.prods[0]
  assert tree.get_left_analysis() == analysis
  assert tree.get_leaves() == tokens
  assert tree == SyntaxTree.from_left_analysis(analysis, tokens=tokens)
  assert SyntaxTree.from_left_analysis(analysis).get_leaves() == (None, None, None)


if __name__ == "__main__":
  try:
    better_exchook.install()
    if len(sys.argv) <= 1:
      for k, v in sorted(globals().items()):
        if k.startswith("test_"):
          print("-" * 40)
          print("Executing: %s" % k)
          try:
            v()
          except unittest.SkipTest as exc:
            print("SkipTest:", exc)
          print("-" * 40)
      print("Finished all tests.")
    else:
      assert len(sys.argv) >= 2
      for arg in sys.argv[1:]:
        print("Executing: %s" % arg)
        if arg in globals():
          globals()[arg]()  # assume function and execute
        else:
          eval(arg)  # assume Python code and execute
  finally:
    pass
