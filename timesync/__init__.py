"""
Sync one-way: Google Calendar -> Notion (time entries).

Pensado para ejecutarse como job periodico (cron / task scheduler).
"""

__version__ = "1.0.0"
