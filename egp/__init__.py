"""
EGP Node - Emergent Governance Protocol

A node for the three-step governance protocol: sense a systemic signal,
propose a time-bounded solution, adopt it as a monitored trial. Every
record is an immutable, content-addressed object linked to its
predecessor by relationship edges.

Protocol Truths:
- Records are never mutated; the graph carries revision history
- Every commitment carries a sunset
- Decisions are auditable against the context available at decision time
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
