from __future__ import annotations

import os

import uvicorn


def run() -> None:
    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "8080"))
    uvicorn.run("api.app:create_app", factory=True, host=host, port=port, reload=False)


if __name__ == "__main__":
    run()
