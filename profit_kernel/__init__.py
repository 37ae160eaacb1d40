"""
Profit Kernel

Value objects and infrastructure for per-job profit calculation:
- Exact-decimal ledger and bucket value objects
- Typed exception hierarchy with machine-readable codes
- Structured JSON logging with request-scoped context
- Injectable clock for snapshot timestamps
"""

__version__ = "0.1.0"
