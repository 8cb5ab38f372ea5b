"""Load testing suite using Locust.

These tests simulate production traffic patterns to validate:
- Read-path throughput under load
- Response time percentiles (p50, p95, p99)
- Cache efficiency of repeated page reads
"""
