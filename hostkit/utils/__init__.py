"""
Shared utilities: structured logging, error tracking, subprocess
execution and streaming content hashing.
"""
