"""
Core components of the audit engine.

Contains:
- CheckState lattice and rollup rules
- BaseCheck with the fault-isolated execute()
- Report and Audit aggregation
- Resolution-time exceptions
"""
