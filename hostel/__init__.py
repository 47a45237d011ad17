"""Hostel management app.

Models, serializers, services and views backing the hostel REST API:
blocks and rooms, residents and staff, attendance, complaints with chat,
notices, inquiries and finance.
"""
