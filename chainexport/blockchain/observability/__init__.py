# MIT License
# Copyright (c) 2025 Hashborn

"""
Observability Module

Provides export metrics for chainexport.
"""

from .metrics import metrics_registry, record_export

__all__ = ['metrics_registry', 'record_export']
