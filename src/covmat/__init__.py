"""
computes region by sample coverage matrices from bigWig tracks using bwtool
"""
__version__ = '0.1.0'
