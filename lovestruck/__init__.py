"""
LOVEStruck photo booth.

Countdown-driven three-shot capture sessions composited into a film-style
photo strip.
"""

__version__ = "0.1.0"
