#!/usr/bin/env python3

"""
Main entry point: build LL(1) parse tables and parse expressions with them.
"""
import sys

import _setup_llparse_env  # noqa
from llparse.cli import main


if __name__ == '__main__':
  sys.exit(main())
