"""Class Attendance package.

This package is organized by feature modules (classes, faculty, audit,
attendance) with a thin Flask controller layer and service/repository layers.
The core answers two questions for every attendance operation: which class
and which faculty member it belongs to, and how the day's record stays
consistent once both are known.
"""
