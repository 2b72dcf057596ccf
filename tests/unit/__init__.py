"""
Unit tests for the upstream retry layer.

Test individual components in isolation:
- Classification (status codes, signature patterns, unreadable bodies)
- Decision engine (rules, delay formula, log lines)
- Retry executor (loop, rotation, cancellation) against a scripted client
- Credential pool, messages client, settings, logging
"""
