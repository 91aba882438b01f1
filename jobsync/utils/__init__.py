"""
Utilities Module

Logging sink, retry policy and filesystem primitives.

Author: JobSync Project
License: MIT
"""
