"""
Integration tests for the upstream retry layer.

Test components together against an in-process mock proxy:
- MessagesClient + RetryExecutor end to end
- Log lines for fixed delay, exponential backoff and account decisions
- Concurrent logical requests sharing one credential pool
"""
