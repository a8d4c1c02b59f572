"""
Structured diagnostics.

Library code never prints. Everything worth reporting (skipped grammar lines, computed sets,
table conflicts, parser steps) is handed to a `DiagnosticSink` as a `DiagnosticEvent`.
Callers pick the sink: `NullSink` drops everything, `CollectingSink` keeps the events,
`PrintSink` narrates them on a stream.
"""
import sys
from typing import Any, Dict, List, Optional, Set, TextIO


class DiagnosticEvent:
  """
  A single diagnostic, e.g. ``DiagnosticEvent('skipped-line', 'missing separator', line_num=3)``.
  """

  def __init__(self, kind: str, message: str, **data):
    self.kind = kind
    self.message = message
    self.data: Dict[str, Any] = data

  def __getitem__(self, key):
    return self.data[key]

  def __repr__(self):
    return 'DiagnosticEvent[%s: %s]' % (self.kind, self.message)

  def __str__(self):
    return '[%s] %s' % (self.kind, self.message)


class DiagnosticSink:
  """
  Receiver of diagnostic events.
  """

  def handle(self, event: DiagnosticEvent):
    raise NotImplementedError

  def emit(self, kind: str, message: str, **data) -> DiagnosticEvent:
    event = DiagnosticEvent(kind, message, **data)
    self.handle(event)
    return event


class NullSink(DiagnosticSink):
  def handle(self, event: DiagnosticEvent):
    pass


class CollectingSink(DiagnosticSink):
  """
  Keeps all events in order.
  """

  def __init__(self):
    self.events: List[DiagnosticEvent] = []

  def handle(self, event: DiagnosticEvent):
    self.events.append(event)

  def of_kind(self, kind: str) -> List[DiagnosticEvent]:
    return [event for event in self.events if event.kind == kind]

  def kinds(self) -> List[str]:
    return [event.kind for event in self.events]

  def clear(self):
    self.events.clear()


class PrintSink(DiagnosticSink):
  """
  Prints events, optionally only some kinds of them.
  """

  def __init__(self, file: Optional[TextIO] = None, kinds: Optional[Set[str]] = None, exclude: Optional[Set[str]] = None):
    """
    :param file: defaults to `sys.stdout` at the time of printing
    :param kinds: if given, only print these kinds
    :param exclude: never print these kinds
    """
    self.file = file
    self.kinds = kinds
    self.exclude = exclude or set()

  def handle(self, event: DiagnosticEvent):
    if self.kinds is not None and event.kind not in self.kinds:
      return
    if event.kind in self.exclude:
      return
    print(str(event), file=self.file if self.file is not None else sys.stdout)


NULL_SINK = NullSink()


def get_sink(sink: Optional[DiagnosticSink]) -> DiagnosticSink:
  return NULL_SINK if sink is None else sink
