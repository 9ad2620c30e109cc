"""
Rotation Scheduler

Workforce scheduling tool that generates a 30-day morning/evening/night
rotation with rest days after night shifts, Sunday rules and derived leave,
and exports it to PDF, Excel or CSV.
"""

__version__ = "1.0.0"
__author__ = "Rotation Scheduler Team"
