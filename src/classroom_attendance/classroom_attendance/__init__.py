"""Classroom Attendance package.

This package is organized by feature modules (roster, attendance, users)
with a thin Flask controller layer and service/repository layers.
"""
