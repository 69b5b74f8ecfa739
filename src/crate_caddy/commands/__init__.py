"""Command handlers for the crate-caddy CLI."""
