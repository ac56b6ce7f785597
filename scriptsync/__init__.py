"""scriptsync — upload server-resident scripts without silently overwriting remote changes."""

__version__ = "0.3.0"
