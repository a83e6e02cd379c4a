"""
REST API over the collected property index.
"""
