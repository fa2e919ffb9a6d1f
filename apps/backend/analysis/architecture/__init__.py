"""
Architecture Analysis Module
============================

Summarizes front-end project architecture: conventional layers, state
management and navigation.
"""

from .summary import ArchitectureLayer, ArchitectureSummary, ArchitectureSummaryProvider

__all__ = ["ArchitectureLayer", "ArchitectureSummary", "ArchitectureSummaryProvider"]
