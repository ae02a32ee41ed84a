# storefront/client/routes.py
"""Uploaded images and the pre-built front-end bundle."""
import os

from flask import Blueprint, current_app, send_from_directory

from storefront.errors import NotFound

client_bp = Blueprint("client_bp", __name__)


@client_bp.get("/uploads/<path:filename>")
def uploaded_file(filename: str):
    return send_from_directory(current_app.config["UPLOAD_FOLDER"], filename)


@client_bp.get("/", defaults={"path": ""})
@client_bp.get("/<path:path>")
def frontend(path: str):
    """Serve build assets; any other route falls back to index.html (SPA routing)."""
    build_dir = current_app.config.get("FRONTEND_DIR")
    if not build_dir or not os.path.isdir(build_dir):
        raise NotFound("Not found")
    if path and os.path.isfile(os.path.join(build_dir, path)):
        return send_from_directory(build_dir, path)
    if not os.path.isfile(os.path.join(build_dir, "index.html")):
        raise NotFound("Not found")
    return send_from_directory(build_dir, "index.html")
