# src/services/driver_service/__init__.py
"""
Driver Service — long-poll новых поездок для водителей.
"""
