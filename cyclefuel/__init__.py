"""
Cycle-aware food recommendation engine.
"""
__version__ = "0.1.0"
