"""
Input layer: reading series files for the CLI.

Submodules:
  series_file : CSV / JSON series loader with optional exogenous columns.
"""
