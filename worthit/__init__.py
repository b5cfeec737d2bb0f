"""
Worth-It Tracker - Source Package

A small logging tool for personal spending and media consumption.
Every entry answers one question: was it worth it?

DESIGN PRINCIPLES:
1. Storage owns the data, the UI only renders copies
2. Storage layer is swappable (local, Sheets, GitHub, REST)
3. A failing backend falls back, it never loses the entry
4. Gestures never raise; odd pointer input is just ignored
5. After every delete the list is re-read from storage
"""

__version__ = "1.0.0"
__author__ = "Worth-It Tracker Team"
