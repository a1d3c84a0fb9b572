"""
sectionstats - Section performance leaderboards, buckets and trace simplification.
"""
__version__ = "1.0.0"
