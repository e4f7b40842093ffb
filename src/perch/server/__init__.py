"""ASGI request handling — dispatch, negotiation, error mapping, sending."""
