"""
KapeViewer - a forensic CSV artifact browser and timeline builder.

This package provides tools for scanning folders of CSV artifact exports
(such as KAPE module output), grouping them by top-level subfolder, and
merging their rows into a single chronologically ordered timeline.
"""

__version__ = "0.1.0"
