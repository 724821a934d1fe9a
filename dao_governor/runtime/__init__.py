# dao_governor/runtime/__init__.py
"""
Runtime building blocks for the governor: clock, token oracle,
proposal store, vote ledger and snapshot persistence.
"""
