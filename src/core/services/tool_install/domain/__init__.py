"""
L1 Domain — pure functions and types.

NO subprocess calls, NO filesystem access, NO network calls.
Pure input→output.
"""
