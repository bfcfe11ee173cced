"""
Models package for the Banker's Algorithm Safety Calculator.
Contains the system state, result value types and error classes.
"""
