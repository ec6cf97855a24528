# Toolkit Broker: category-based tool catalog and dispatch service
# Main module initialization

__version__ = "0.1.0"


def _is_port_in_use(port: int) -> bool:
    import socket
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.settimeout(0.5)
        return s.connect_ex(("127.0.0.1", port)) == 0


def _find_available_port(start_port: int, tries: int = 10) -> int | None:
    for port in range(start_port, start_port + max(1, tries)):
        if not _is_port_in_use(port):
            return port
    return None


def main() -> None:
    """CLI entry point for the application (with dynamic port fallback)."""
    import os

    import uvicorn

    from .config import get_config

    settings = get_config()
    host = settings.host
    port = settings.port

    if os.getenv("PORT") is not None:
        # Respect explicit env PORT (no auto-fallback)
        if _is_port_in_use(port):
            raise SystemExit(f"PORT {port} is already in use and was explicitly set. Aborting.")
    elif _is_port_in_use(port):
        fallback = _find_available_port(port + 1, tries=10)
        if fallback is None:
            raise SystemExit(f"No available port found near {port}. Aborting.")
        port = fallback

    uvicorn.run(
        "toolkit_broker.main:app",
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
        reload=False,
    )
