"""Layered layout and directed-overlay rendering of small-world graphs."""

from smallworld_viz.render import render

__all__ = ["render"]
__version__ = "0.1.0"
