"""JSON-RPC endpoints, trace parsers and the bytecode recovery loop.

Supports two trace families:
  - ``trace_transaction`` flat call lists
  - ``debug_traceTransaction`` nested callTracer frames
"""
