"""
Chrome Extension Scanner
Point-in-time scan of local Chromium profiles for extensions carrying known indicator strings
"""

__version__ = "0.1.0"
