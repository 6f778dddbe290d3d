"""
SQLite persistence for practice-session results.
"""
