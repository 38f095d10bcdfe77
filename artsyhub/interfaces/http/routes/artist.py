import logging
from flask import Blueprint, jsonify, current_app

from artsyhub.errors import UpstreamError, UpstreamNotFound

logger = logging.getLogger(__name__)

artist_bp = Blueprint('artist_bp', __name__, url_prefix='/api')


def get_artsy_client():
    return current_app.extensions['artsy_client']


def _upstream_failure(message: str, exc: UpstreamError):
    logger.error("%s: %s", message, exc)
    return jsonify({"error": message}), 500


@artist_bp.route('/search/<path:query>', methods=['GET'])
def search_artists_api(query):
    query = query.strip()
    if not query:
        return jsonify({"error": "Search query is required"}), 400
    try:
        artists = get_artsy_client().search_artists(query)
    except UpstreamError as exc:
        return _upstream_failure("Failed to fetch search results", exc)
    return jsonify({"artists": artists})


@artist_bp.route('/artist/<artist_id>', methods=['GET'])
def artist_details_api(artist_id):
    artist_id = artist_id.strip()
    if not artist_id:
        return jsonify({"error": "Artist ID is required"}), 400
    try:
        artist = get_artsy_client().get_artist(artist_id)
    except UpstreamNotFound:
        return jsonify({"error": "Artist not found"}), 404
    except UpstreamError as exc:
        return _upstream_failure("Failed to fetch artist details", exc)
    return jsonify(artist)


@artist_bp.route('/artist/<artist_id>/artworks', methods=['GET'])
def artist_artworks_api(artist_id):
    artist_id = artist_id.strip()
    if not artist_id:
        return jsonify({"error": "Artist ID is required"}), 400
    try:
        artworks = get_artsy_client().list_artworks(artist_id)
    except UpstreamError as exc:
        return _upstream_failure("Failed to fetch artworks", exc)
    return jsonify({"artworks": artworks})


@artist_bp.route('/artwork/<artwork_id>/categories', methods=['GET'])
def artwork_categories_api(artwork_id):
    artwork_id = artwork_id.strip()
    if not artwork_id:
        return jsonify({"error": "Artwork ID is required"}), 400
    try:
        categories = get_artsy_client().list_categories(artwork_id)
    except UpstreamError as exc:
        return _upstream_failure("Failed to fetch categories", exc)
    return jsonify({"categories": categories})


@artist_bp.route('/artist/<artist_id>/similar', methods=['GET'])
def similar_artists_api(artist_id):
    artist_id = artist_id.strip()
    if not artist_id:
        return jsonify({"error": "Artist ID is required"}), 400
    try:
        similar = get_artsy_client().list_similar(artist_id)
    except UpstreamError as exc:
        return _upstream_failure("Failed to fetch similar artists", exc)
    return jsonify({"similar": similar})
