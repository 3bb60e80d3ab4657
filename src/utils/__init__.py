"""
Utility modules for image I/O and logging setup.
"""
