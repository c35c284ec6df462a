"""Backend for the tps-admin desktop app: image content store and UI commands."""
