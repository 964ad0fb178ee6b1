"""
Command line interface for darkroom
"""
