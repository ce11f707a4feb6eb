"""
PitchLog - personal football performance tracker
"""

__version__ = "1.0.0"
