# src/services/rider_service/__init__.py
"""
Rider Service — long-poll принятия поездки для пассажира.
"""
