"""
makeupbooker - book make-up class computer slots and view the weekly schedule.
"""

__version__ = "0.1.0"
