"""
CLI Command Modules

Each module contains a logical group of related commands; main.py wires
them into the top-level app.
"""

from fixforge.cli import analyze, apply, config_cmd

__all__ = ['analyze', 'apply', 'config_cmd']
