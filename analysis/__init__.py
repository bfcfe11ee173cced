"""
Analysis package for the Banker's Algorithm Safety Calculator.
Contains the step trace model, statistics and trace replay.
"""
