"""
IQ XCorr - Delay and phase estimation between two IQ recordings

Load matching windows from two raw int16 IQ captures, cross-correlate
them over every lag on a pool of worker threads, and report the shift
and phase offset at the correlation peak.
"""

__version__ = "0.1.0"
