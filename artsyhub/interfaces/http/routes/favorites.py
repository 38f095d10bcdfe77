"""Favorite artist listing, adding and removal."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required

from artsyhub.domain.favorites import FavoriteCandidate


favorite_bp = Blueprint('favorite_bp', __name__, url_prefix='/api/favorites')


def get_favorite_store():
    return current_app.extensions['favorite_store']


@favorite_bp.route('', methods=['GET'])
@login_required
def list_favorites():
    favorites = get_favorite_store().list(current_user.id)
    return jsonify({'favorites': [favorite.to_dict() for favorite in favorites]}), 200


@favorite_bp.route('', methods=['POST'])
@login_required
def add_favorite():
    payload = request.get_json(silent=True) or {}
    candidate = FavoriteCandidate.from_payload(payload)
    favorite = get_favorite_store().add(current_user.id, candidate)
    return jsonify({'favorite': favorite.to_dict()}), 201


@favorite_bp.route('/<artist_id>', methods=['DELETE'])
@login_required
def remove_favorite(artist_id: str):
    if not get_favorite_store().remove(current_user.id, artist_id):
        return jsonify({'message': 'Favorite not found for this user.'}), 404
    return jsonify({'message': 'Artist removed from favorites'}), 200


__all__ = ['favorite_bp']
