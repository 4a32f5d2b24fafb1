"""
Lancement local: python -m seasonpass

Variables lues:
- PORT (8000), UVICORN_RELOAD ("1"/"true"/"yes"), LOG_LEVEL ("info")
"""
import os

import uvicorn

def main() -> None:
    uvicorn.run(
        "seasonpass.asgi:app",
        host="0.0.0.0",
        port=int(os.environ.get("PORT", 8000)),
        reload=os.environ.get("UVICORN_RELOAD", "").lower() in ("1", "true", "yes"),
        log_level=os.environ.get("LOG_LEVEL", "info"),
        proxy_headers=True,
        server_header=False,
    )

if __name__ == "__main__":
    main()
