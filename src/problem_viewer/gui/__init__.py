"""
PySide6 desktop surface for the problem viewer.
"""
