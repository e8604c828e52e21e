"""
Order services package for commerce to PickHero synchronization.

This package contains all services related to order synchronization,
following SOLID principles for better maintainability.
"""

from app.services.orders.orchestrator import OrderSyncOrchestrator, SyncOptions, create_orchestrator

__all__ = ["OrderSyncOrchestrator", "SyncOptions", "create_orchestrator"]
