"""
basenames.cli
=============

Typer-based command-line interface, installed as the `basenames` console
script.

    >>> from basenames.cli import run
    >>> run(["keys"])
"""

from .main import app, run

__all__ = ["app", "run"]
