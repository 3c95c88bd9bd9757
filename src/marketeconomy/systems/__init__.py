"""Algorithms of the four sub-engines, as functions over roles and host records."""
