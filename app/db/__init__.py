"""
Módulo de acceso a la base de datos local de sincronización.

- ConnDB: Gestión exclusiva de conexiones
- tables: Tablas de SQLAlchemy Core
- repositories: Acceso al estado de sincronización y a los webhooks
"""

from app.db.connection import ConnDB, close_database, get_db_connection, initialize_database

__all__ = [
    "ConnDB",
    "get_db_connection",
    "initialize_database",
    "close_database",
]
