"""
Tablas del almacén de estado de sincronización.

Se definen con SQLAlchemy Core (sin clases ORM) y se crean al arrancar
la aplicación con ``metadata.create_all``.
"""

from sqlalchemy import Boolean, Column, DateTime, Integer, MetaData, String, Table, Text

metadata = MetaData()

# Estado de sincronización por pedido (único por order_id)
order_sync_table = Table(
    "pickhero_order_sync",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("order_id", Integer, nullable=False, unique=True),
    Column("pickhero_order_id", Integer, nullable=True),
    Column("pickhero_order_number", String(255), nullable=True),
    Column("pushed", Boolean, nullable=False, default=False),
    Column("stock_allocated", Boolean, nullable=False, default=False),
    Column("processed", Boolean, nullable=False, default=False),
    Column("submission_count", Integer, nullable=False, default=0),
    Column("public_status_page", Text, nullable=True),
    Column("date_created", DateTime(timezone=True), nullable=False),
    Column("date_updated", DateTime(timezone=True), nullable=False),
    Column("date_deleted", DateTime(timezone=True), nullable=True),
)

# Registro de webhooks en PickHero (único por tipo)
webhook_table = Table(
    "pickhero_webhooks",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("type", String(64), nullable=False, unique=True),
    Column("pickhero_webhook_id", Integer, nullable=True),
    Column("secret", String(255), nullable=True),
    Column("date_created", DateTime(timezone=True), nullable=False),
    Column("date_updated", DateTime(timezone=True), nullable=False),
)
