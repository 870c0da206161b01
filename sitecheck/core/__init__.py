"""
Core utilities.
"""
