"""
Aggregation, classification and report assembly over collected step metrics.
"""
