"""
Streaming functionality for LLM clients.

- parser: incremental SSE decoding into content deltas
- session: cancellable request/response streaming sessions
"""
