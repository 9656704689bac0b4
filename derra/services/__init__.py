"""
Service layer.

Each service wraps a Storage and turns its None/False results into the
exception taxonomy in derra.core.exceptions.
"""
