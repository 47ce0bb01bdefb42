"""
Case Intake: validates and extracts case file ZIP archives.
"""

__version__ = "1.0.0"
