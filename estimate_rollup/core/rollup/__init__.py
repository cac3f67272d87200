"""Bottom-up roll-up of estimate totals.

Validation happens first and separately (core.validate); everything here
assumes a well-shaped document and only does the numeric reduction and
the position ordering of major tasks.
"""
