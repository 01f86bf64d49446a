"""Bed availability application.

Models, serializers, services, views and route registrations for the
ward availability API, plus the asynchronous client in ``client``.
"""
