"""Wags Directory — directorio de viaje con mascotas."""
