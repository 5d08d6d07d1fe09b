"""
Interfaces (puertos) de la capa de aplicacion.
"""
