"""
Packaged data files (default rule set, sample claims).
"""
