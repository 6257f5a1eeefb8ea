"""
prompt3d

Natural language (optionally with a reference image) -> OpenSCAD -> STL.
"""

__version__ = "0.1.0"
