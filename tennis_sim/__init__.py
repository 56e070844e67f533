"""
Stochastic tennis match simulator: point-by-point matches with live
win-probability logging, run in parallel batches to estimate win rates.
"""
