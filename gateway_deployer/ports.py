"""Translation between listener ports and the ports the proxy binds to.

The proxy runs as a non-root user, so privileged listener ports are shifted
into the unprivileged range inside the container. The Service keeps exposing
the listener port and targets the translated one.
"""

__all__ = ["translate_port"]

PORT_OFFSET = 8000
PRIVILEGED_PORT_LIMIT = 1024


def translate_port(port: int) -> int:
    """Return the container port used for the given listener port."""
    if port >= PRIVILEGED_PORT_LIMIT:
        return port
    return port + PORT_OFFSET
