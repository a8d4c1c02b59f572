import _setup_test_env  # noqa
import contextlib
import io
import sys
import tempfile
import unittest
from pathlib import Path
import better_exchook
import pytest

from llparse.cli import main
from llparse.errors import GrammarLoadError

EXPR_GRAMMAR = "E : T E'\nE' : + T E'\nE' : epsilon\nT : id\n"


def _run(argv):
  """
  :param list[str] argv:
  :returns: exit code and stdout
  :rtype: (int, str)
  """
  out = io.StringIO()
  with contextlib.redirect_stdout(out):
    code = main(argv)
  return code, out.getvalue()


@contextlib.contextmanager
def _files(**contents):
  """
  Writes each keyword argument to a file of that name in a fresh directory.
  """
  with tempfile.TemporaryDirectory() as tmp_dir:
    paths = {}
    for name, content in contents.items():
      paths[name] = Path(tmp_dir) / name
      paths[name].write_text(content)
    paths['dir'] = Path(tmp_dir)
    yield paths


def test_cli_sets():
  with _files(grammar=EXPR_GRAMMAR) as paths:
    code, out = _run(['sets', '-g', str(paths['grammar'])])
  assert code == 0
  assert out == "First sets:\nE id\nE' + epsilon\nT id\nFollow sets:\nE $\nE' $\nT $ +\n"


def test_cli_table():
  with _files(grammar=EXPR_GRAMMAR) as paths:
    code, out = _run(['table', '-g', str(paths['grammar'])])
    assert code == 0
    assert out == "E\tid\tT\tE'\nE'\t+\t+\tT\tE'\nE'\t$\nT\tid\tid\n"
    table_path = paths['dir'] / 'table.txt'
    code, out = _run(['table', '-g', str(paths['grammar']), '-o', str(table_path)])
    assert code == 0
    assert table_path.read_text() == "E\tid\tT\tE'\nE'\t+\t+\tT\tE'\nE'\t$\nT\tid\tid\n"


def test_cli_table_start():
  with _files(grammar=EXPR_GRAMMAR) as paths:
    code, out = _run(['table', '-g', str(paths['grammar']), '--start', 'T'])
    assert code == 0
    assert out.splitlines()[0] == 'T\tid\tid'
    code, out = _run(['table', '-g', str(paths['grammar']), '--start', 'X'])
    assert code == 1
    assert 'not a non-terminal' in out


def test_cli_table_conflict():
  with _files(grammar='S : T id\nT : id\nT : epsilon\n') as paths:
    with pytest.warns(UserWarning):
      code, out = _run(['table', '-g', str(paths['grammar'])])
    assert code == 0
    assert out.startswith('Warning: Grammar not LL(1)! Conflict at [T, id]')
    code, out = _run(['table', '-g', str(paths['grammar']), '--strict'])
    assert code == 1
    assert 'Grammar not LL(1)' in out


def test_cli_parse():
  with _files(grammar=EXPR_GRAMMAR, good='a + 1 + b', bad='a +') as paths:
    code, out = _run(['parse', '-g', str(paths['grammar']), str(paths['good'])])
    assert code == 0
    assert out == 'Parsing completed successfully.\n'
    code, out = _run(['parse', '-g', str(paths['grammar']), str(paths['bad'])])
    assert code == 1
    assert out.startswith('Parse error on line 1:4')
    assert 'end of input' in out


def test_cli_parse_with_saved_table():
  with _files(grammar=EXPR_GRAMMAR, good='x+y') as paths:
    table_path = paths['dir'] / 'table.txt'
    assert _run(['table', '-g', str(paths['grammar']), '-o', str(table_path)])[0] == 0
    code, out = _run(['parse', '--table', str(table_path), '--tokens', str(paths['good'])])
    assert code == 0
    assert out == "id\t'x'\n+\t'+'\nid\t'y'\n$\t''\nParsing completed successfully.\n"


def test_cli_parse_trace():
  with _files(grammar=EXPR_GRAMMAR, good='x') as paths:
    code, out = _run(['parse', '-g', str(paths['grammar']), '--trace', str(paths['good'])])
  assert code == 0
  assert "[trace] stack top E, lookahead 'id' (lexeme 'x')" in out
  assert "[apply] applying E -> T E'" in out
  assert "[match] matched 'x'" in out


def test_cli_errors():
  with _files(grammar='nothing useful\n', bad='a ? b') as paths:
    code, out = _run(['sets', '-g', str(paths['grammar'])])
    assert code == 1
    assert '[skipped-line] line 1: missing separator' in out
    assert 'No valid production found' in out
    with pytest.raises(GrammarLoadError):
      main(['--verbose', 'sets', '-g', str(paths['grammar'])])
  with _files(grammar=EXPR_GRAMMAR, bad='a ? b') as paths:
    code, out = _run(['parse', '-g', str(paths['grammar']), str(paths['bad'])])
    assert code == 1
    assert out.startswith('Lexical error on line 1:3')


def test_cli_parse_needs_grammar_or_table():
  with pytest.raises(SystemExit):
    with contextlib.redirect_stderr(io.StringIO()):
      main(['parse', 'input.txt'])


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
