"""
Core modules for the FlightDeck runtime.

This package contains capability pricing, the routing policy, the
dispatcher with its fallback chain, and the shared usage ledger.
"""
