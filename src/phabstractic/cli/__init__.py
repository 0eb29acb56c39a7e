"""Phabstractic command-line interface."""
