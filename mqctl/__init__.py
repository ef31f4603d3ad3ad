"""Message views, send/receive requests, events-store statistics and cluster and connector manifests."""

__version__ = "0.1.0"