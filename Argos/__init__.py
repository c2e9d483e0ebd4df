"""
Argos - sensitive file discovery for Windows filesystems and mounted images.
"""
__version__ = "0.1.0"
