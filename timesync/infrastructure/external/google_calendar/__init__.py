"""
Lectura de eventos de Google Calendar (solo lectura).
"""
