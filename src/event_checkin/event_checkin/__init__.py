"""Event Check-in package.

This package is organized by feature modules (users, events, attendees, checkin, ...)
with a thin Flask controller layer and service/repository layers underneath.
"""
