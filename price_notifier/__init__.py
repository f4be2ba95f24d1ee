"""
Price change notification pipeline
"""
__version__ = "1.0.0"
