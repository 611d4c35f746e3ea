"""Command line interface for md2html."""
