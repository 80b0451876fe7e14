"""
Deal Watch
Hotel deal detection and personalization pipeline
"""

__version__ = "1.0.0"
