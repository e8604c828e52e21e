# app/db/connection.py
"""
Clase ConnDB para gestión de la conexión a la base de datos local.

La base de datos local guarda únicamente el estado de sincronización
(pedidos enviados a PickHero y webhooks registrados). Por defecto es
SQLite vía aiosqlite; cualquier URL async de SQLAlchemy es válida.
"""

import logging
from typing import Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.config import get_settings
from app.db.tables import metadata
from app.utils.error_handler import ConfigurationException

logger = logging.getLogger(__name__)


class ConnDB:
    """
    Gestión del engine async y de la fábrica de sesiones.

    Args:
        database_url: URL de SQLAlchemy; por defecto ``settings.DATABASE_URL``
    """

    def __init__(self, database_url: Optional[str] = None):
        self.database_url = database_url or get_settings().DATABASE_URL
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker] = None

    async def initialize(self, create_tables: bool = True):
        """
        Inicializa el engine y crea las tablas si no existen.

        Args:
            create_tables: Ejecutar ``metadata.create_all`` al iniciar
        """
        if self.engine is not None:
            logger.info("Database connection already initialized")
            return

        logger.info("Initializing database connection...")

        engine_kwargs = {"echo": False, "future": True}
        if ":memory:" in self.database_url:
            # Una única conexión compartida, si no cada conexión ve una base distinta
            engine_kwargs.update(poolclass=StaticPool, connect_args={"check_same_thread": False})
        elif not self.database_url.startswith("sqlite"):
            engine_kwargs.update(pool_pre_ping=True, pool_recycle=3600)

        self.engine = create_async_engine(self.database_url, **engine_kwargs)
        self.session_factory = async_sessionmaker(self.engine, class_=AsyncSession, expire_on_commit=False)

        if create_tables:
            await self.create_tables()

        logger.info("✅ Database connection initialized successfully")

    async def create_tables(self):
        """Crea las tablas de sincronización si no existen."""
        async with self.engine.begin() as conn:
            await conn.run_sync(metadata.create_all)

    def get_session(self) -> AsyncSession:
        """
        Obtiene una nueva sesión de base de datos.

        Returns:
            AsyncSession: Sesión asíncrona de SQLAlchemy

        Raises:
            ConfigurationException: Si no hay conexión inicializada
        """
        if self.session_factory is None:
            raise ConfigurationException(
                message="Database connection not initialized. Call initialize() first.",
                setting="DATABASE_URL",
            )
        return self.session_factory()

    def is_initialized(self) -> bool:
        return self.engine is not None and self.session_factory is not None

    async def test_connection(self) -> bool:
        """
        Prueba la conexión a la base de datos de forma no destructiva.

        Returns:
            bool: True si la conexión funciona correctamente
        """
        if not self.is_initialized():
            return False

        try:
            async with self.get_session() as session:
                result = await session.execute(text("SELECT 1"))
                return result.scalar() == 1
        except SQLAlchemyError as e:
            logger.error(f"Connection test failed: {e}")
            return False

    async def close(self):
        """
        Cierra la conexión y limpia todos los recursos.
        """
        if self.engine:
            await self.engine.dispose()
            logger.info("Database engine disposed")

        self.engine = None
        self.session_factory = None

    def __repr__(self) -> str:
        return f"ConnDB(initialized={self.is_initialized()}, url={self.database_url.split('://')[0]})"


# Instancia global de la aplicación
_conn_db_instance: Optional[ConnDB] = None


def get_db_connection() -> ConnDB:
    """
    Obtiene la instancia global de ConnDB.

    Returns:
        ConnDB: Instancia de conexión a base de datos
    """
    global _conn_db_instance

    if _conn_db_instance is None:
        _conn_db_instance = ConnDB()

    return _conn_db_instance


async def initialize_database():
    """
    Función de conveniencia para inicializar la base de datos.
    """
    await get_db_connection().initialize()


async def close_database():
    """
    Función de conveniencia para cerrar la base de datos.
    """
    global _conn_db_instance

    if _conn_db_instance is not None:
        await _conn_db_instance.close()
        _conn_db_instance = None
