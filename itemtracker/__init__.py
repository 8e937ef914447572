"""
Item Tracker - save-file collection tracker.
"""

__version__ = "1.0.0"
