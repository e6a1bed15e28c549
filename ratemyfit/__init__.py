"""
RateMyFit

Clothing tag extraction from outfit feedback, and recovery of structured
outfit analyses from unreliable model output.
"""

__version__ = "0.1.0"
