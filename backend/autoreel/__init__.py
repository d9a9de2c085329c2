"""
AutoReel: execution tracking for the automated video production pipeline.
"""

__version__ = "0.1.0"
