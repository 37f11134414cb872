# src/services/ride_service/__init__.py
"""
Ride Service — создание и принятие поездок.
"""
