"""Attendance Badges package.

Organized by feature modules (users, meetings, checkins, badges, ...) with a
thin Flask controller layer over service/repository layers. Accepted check-ins
enqueue badge jobs that a background worker fulfils in batches.
"""
