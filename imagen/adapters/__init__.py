"""Generator adapters around the live clients.

- recording: wraps a live generator and records every call
- replaying: serves calls from a cassette
"""
