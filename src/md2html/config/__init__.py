"""Configuration models and defaults for md2html."""
