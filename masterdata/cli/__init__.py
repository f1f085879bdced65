"""Command line interface (``python -m masterdata.cli``)."""
