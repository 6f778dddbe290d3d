"""
Configuration loading for the FlightDeck runtime.
"""
