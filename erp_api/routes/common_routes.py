import os

from flask import Blueprint, current_app, send_from_directory

common_bp = Blueprint('common', __name__)


@common_bp.route('/uploads/<path:filename>')
def serve_uploaded_file(filename):
    """Serve files saved under UPLOAD_FOLDER (company logos)."""
    uploads_path = os.path.abspath(current_app.config['UPLOAD_FOLDER'])
    return send_from_directory(uploads_path, filename)
