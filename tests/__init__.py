"""
Test suite for the boundary chooser.
"""
