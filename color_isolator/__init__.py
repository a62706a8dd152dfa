"""
Color Isolator
Keep one sampled color, turn everything else gray.
"""

__version__ = "1.0.0"
