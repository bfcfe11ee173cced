"""
Utilities package for the Banker's Algorithm Safety Calculator.
Contains matrix/vector primitives, logging and scenario loading.
"""
