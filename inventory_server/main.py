"""
Entry point for the inventory server.

Run with ``python -m inventory_server.main`` or point uvicorn at
``inventory_server.main:app``.
"""

from .app.factory import create_app

app = create_app()


if __name__ == "__main__":
    import os

    import uvicorn

    uvicorn.run(
        "inventory_server.main:app",
        host=os.getenv("INVENTORY_SERVER_HOST", "127.0.0.1"),
        port=int(os.getenv("INVENTORY_SERVER_PORT", "8000")),
        reload=False,
        access_log=True,
        use_colors=False,  # Disable colors for structured logging
    )
