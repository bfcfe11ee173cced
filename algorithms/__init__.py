"""
Algorithms package for the Banker's Algorithm Safety Calculator.
Contains the safety and resource-request algorithms and state construction.
"""
