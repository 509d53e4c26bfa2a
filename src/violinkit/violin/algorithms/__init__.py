"""Algorithms used by violin view model generation.

Pure pandas/numpy implementations of each pipeline stage: category
aggregation and statistics, Silverman bandwidth, kernel windows and kernel
density estimation with tail convergence.
"""
