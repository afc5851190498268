"""Built-in client credentials used when none are configured."""


def default_clients() -> dict[str, str]:
    """Return the default client-id to secret mapping."""
    return {"sho": "test123"}
