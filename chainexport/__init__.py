# MIT License
# Copyright (c) 2025 Hashborn

"""
chainexport - chain-state export and genesis reconstruction.
"""

__version__ = "0.4.0"
