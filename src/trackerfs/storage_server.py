"""Minimal storage node for local runs and integration tests.

Stores raw PUT bodies under STORAGE_DIR, keyed by the request path, and
serves them back on GET.
"""
import logging
import os

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import FileResponse, Response

logger = logging.getLogger(__name__)

STORAGE_DIR = os.getenv("STORAGE_DIR", "storage")
host = os.getenv("HOST", "0.0.0.0")
port = int(os.getenv("PORT", "7500"))


def create_app(storage_dir=STORAGE_DIR):
    app = FastAPI()
    root = os.path.abspath(storage_dir)

    def local_path(path):
        full = os.path.abspath(os.path.join(root, path))
        if os.path.commonpath([root, full]) != root or full == root:
            raise HTTPException(status_code=400, detail="Invalid path")
        return full

    @app.on_event("startup")
    async def startup():
        os.makedirs(root, exist_ok=True)
        logger.info("storage node serving %s", root)

    @app.put("/{path:path}")
    async def put_file(path: str, request: Request):
        file_path = local_path(path)
        os.makedirs(os.path.dirname(file_path), exist_ok=True)
        size = 0
        with open(file_path, "wb") as f:
            async for chunk in request.stream():
                f.write(chunk)
                size += len(chunk)
        logger.info("stored %s (%d bytes)", path, size)
        return Response(status_code=200)

    @app.get("/{path:path}")
    async def get_file(path: str):
        file_path = local_path(path)
        if not os.path.isfile(file_path):
            raise HTTPException(status_code=404, detail="File not found")
        return FileResponse(file_path, media_type="application/octet-stream")

    @app.delete("/{path:path}")
    async def delete_file(path: str):
        file_path = local_path(path)
        if os.path.isfile(file_path):
            os.remove(file_path)
            return {"status": "deleted"}
        raise HTTPException(status_code=404, detail="File not found")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("trackerfs.storage_server:app", host=host, port=port)
