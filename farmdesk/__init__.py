# farmdesk/__init__.py
"""Admin console for the farm marketplace backend."""

__version__ = "0.3.0"
