"""CLI package.

The ``cli`` sub-package contains the Click application and its
commands.  Commands import the codec machinery lazily so that
``doccodec --help`` stays fast.
"""
from __future__ import annotations
