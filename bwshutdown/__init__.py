"""
bwshutdown
==========
Sustained low-bandwidth detection with a shutdown trigger.
"""

__version__ = "1.0.0"
