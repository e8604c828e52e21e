"""
Domain layer for commerce-PickHero synchronization.

This layer contains the commerce entities seen by the service and the
synchronization state kept for them.
"""
