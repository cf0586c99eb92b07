"""
Bookkeeping Kernel

The invariant-holding core of the multi-company ledger:
- Insertion-ordered entity stores keyed by UUID
- Per-company owned-identifier sets (tenancy)
- Discriminated operation results and a typed error taxonomy
- Lossless record codec and pluggable persistence gateways
"""

__version__ = "0.1.0"
