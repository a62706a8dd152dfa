#!/usr/bin/env python3
"""
Color Isolator API Server
Upload an image, click a pixel, get back the image with only that color kept.
"""

import os
import logging
import uuid
from typing import Dict
from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from flask import Flask, request, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException
from werkzeug.utils import secure_filename

# --- Centralized Logging Configuration ---
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
    datefmt='%H:%M:%S'
)

from .errors import ColorIsolatorError, ImageDecodeError
from .models.coordinate import Coordinate
from .pipeline.isolation_session import IsolationSession
from .services.image_service import ImageService
from .services.similarity_classifier import validate_tolerance

app = Flask(__name__)
CORS(app)  # Enable CORS for frontend communication

# Configuration
ALLOWED_EXTENSIONS = set(os.getenv("ALLOWED_EXTENSIONS", "png,jpg,jpeg,bmp,webp,tif,tiff").split(","))
MAX_UPLOAD_SIZE_MB = int(os.getenv("MAX_UPLOAD_SIZE_MB", "20"))
app.config['MAX_CONTENT_LENGTH'] = MAX_UPLOAD_SIZE_MB * 1024 * 1024

# Initialize services
image_service = ImageService()

logger = logging.getLogger(__name__)

# Session storage: one source image + reference color per user
sessions: Dict[str, IsolationSession] = {}


def get_or_create_session(session_id: str = None) -> IsolationSession:
    """Get existing session or create new one."""
    if not session_id:
        session_id = str(uuid.uuid4())

    if session_id not in sessions:
        sessions[session_id] = IsolationSession(session_id)

    return sessions[session_id]


def allowed_file(filename: str) -> bool:
    """Check if file extension is allowed."""
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


def parse_tolerance(payload: dict):
    value = payload.get('tolerance')
    return None if value is None else validate_tolerance(value)


def lookup_session(payload: dict):
    session_id = payload.get('session_id')
    if not session_id or session_id not in sessions:
        return None
    return sessions[session_id]


@app.route('/api/load-image', methods=['POST'])
def load_image():
    """Decode an uploaded image into the session. Drops any selected color."""
    try:
        if 'image' not in request.files:
            return jsonify({'success': False, 'message': 'No image provided'}), 400

        file = request.files['image']
        if file.filename == '':
            return jsonify({'success': False, 'message': 'No file selected'}), 400

        filename = secure_filename(file.filename)
        if not allowed_file(filename):
            return jsonify({'success': False, 'message': f'File type not allowed: {filename}'}), 400

        try:
            source = image_service.decode(file.read())
        except ImageDecodeError as e:
            logger.warning(f"Rejected upload {filename}: {e}")
            return jsonify({
                'success': False,
                'message': "Oops, that doesn't look like a valid image file. Please try again."
            }), 400

        session = get_or_create_session(request.form.get('session_id'))
        session.load(source)

        return jsonify({
            'success': True,
            'session_id': session.session_id,
            'width': source.width,
            'height': source.height,
            'original': image_service.to_base64(source),
            'message': 'Select a color from your image.'
        })

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Image loading error: {e}")
        return jsonify({'success': False, 'message': f'Error loading image: {str(e)}'}), 500


@app.route('/api/sample', methods=['POST'])
def sample_color():
    """Sample the clicked pixel, store it as the reference and isolate it."""
    try:
        payload = request.get_json(silent=True) or {}
        session = lookup_session(payload)
        if session is None:
            return jsonify({'success': False, 'message': 'Invalid session'}), 400
        if session.source is None:
            return jsonify({'success': False, 'message': 'No image loaded'}), 400

        try:
            x, y = payload['x'], payload['y']
            display_w, display_h = payload.get('display_width'), payload.get('display_height')
            if display_w is not None or display_h is not None:
                coord = Coordinate.from_display(
                    float(x), float(y),
                    (float(display_w), float(display_h)),
                    (session.source.width, session.source.height),
                )
            else:
                coord = Coordinate(int(x), int(y))
            # validate before select() replaces the stored reference
            tolerance = parse_tolerance(payload)

            color = session.select(coord)
            isolated = session.render(tolerance)
        except ColorIsolatorError as e:
            return jsonify({'success': False, 'message': str(e)}), 400
        except (KeyError, TypeError, ValueError) as e:
            return jsonify({'success': False, 'message': f'Bad request: {e}'}), 400

        return jsonify({
            'success': True,
            'session_id': session.session_id,
            'color': {
                'red': color.red,
                'green': color.green,
                'blue': color.blue,
                'alpha': color.alpha,
            },
            'rgba': color.to_css(),
            'isolated': image_service.to_base64(isolated),
            'message': f'Selected color: {color.to_css()}'
        })

    except Exception as e:
        logger.error(f"Sampling error: {e}")
        return jsonify({'success': False, 'message': f'Error sampling color: {str(e)}'}), 500


@app.route('/api/isolate', methods=['POST'])
def isolate():
    """Re-run the isolation pass, e.g. with a different tolerance."""
    try:
        payload = request.get_json(silent=True) or {}
        session = lookup_session(payload)
        if session is None:
            return jsonify({'success': False, 'message': 'Invalid session'}), 400
        if session.source is None:
            return jsonify({'success': False, 'message': 'No image loaded'}), 400
        if session.reference is None:
            return jsonify({'success': False, 'message': 'No color selected'}), 400

        try:
            isolated = session.render(parse_tolerance(payload))
        except (ColorIsolatorError, TypeError, ValueError) as e:
            return jsonify({'success': False, 'message': str(e)}), 400

        return jsonify({
            'success': True,
            'session_id': session.session_id,
            'rgba': session.reference.to_css(),
            'isolated': image_service.to_base64(isolated),
        })

    except Exception as e:
        logger.error(f"Isolation error: {e}")
        return jsonify({'success': False, 'message': f'Error isolating color: {str(e)}'}), 500


@app.route('/api/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return jsonify({
        'status': 'healthy',
        'message': 'Color Isolator API is running',
        'active_sessions': len(sessions)
    })


@app.route('/api/clear-session', methods=['POST'])
def clear_session():
    """Clear a session and free memory."""
    try:
        payload = request.get_json(silent=True) or {}
        session = lookup_session(payload)
        if session is not None:
            session.clear()
            del sessions[session.session_id]
            return jsonify({'success': True, 'message': 'Session cleared'})
        else:
            return jsonify({'success': False, 'message': 'Session not found'})
    except Exception as e:
        logger.error(f"Error clearing session: {e}")
        return jsonify({'success': False, 'message': 'Error clearing session'}), 500


@app.errorhandler(413)
def too_large(e):
    """Handle file too large error."""
    return jsonify({'error': f'File too large. Maximum size is {MAX_UPLOAD_SIZE_MB}MB.'}), 413


@app.errorhandler(500)
def internal_error(e):
    """Handle internal server error."""
    logger.error(f"Internal server error: {e}")
    return jsonify({'error': 'Internal server error'}), 500


def main():
    host = os.getenv("API_HOST", "127.0.0.1")
    port = int(os.getenv("API_PORT", "5000"))
    logger.info(f"Starting Color Isolator API on {host}:{port}")
    app.run(host=host, port=port)


if __name__ == '__main__':
    main()
