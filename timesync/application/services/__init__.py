"""
Servicios de aplicacion (logica pura).
"""
