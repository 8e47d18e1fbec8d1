"""
Table export - parallel segmented scans funneled into a single CSV writer.
"""
__version__ = "0.1.0"
