"""Mixtape API: search, recommendations, listing and creation on Spotify."""

from __future__ import annotations

import logging
from typing import List, Type, TypeVar

from flask import Blueprint, current_app, jsonify, request
from flask_login import login_required
from pydantic import BaseModel, ValidationError

from mixtape.domain.mixtapes import ErrorKind, MixtapeError, MixtapeService
from mixtape.models.dto import CreatePlaylistInput, PlaylistsQuery, RecommendationQuery, SearchQuery
from mixtape.support.identity import resolve_spotify_session

logger = logging.getLogger(__name__)

spotify_bp = Blueprint('spotify_bp', __name__, url_prefix='/api/spotify')

InputModel = TypeVar('InputModel', bound=BaseModel)


class InvalidInput(Exception):
    """Request arguments or body failed validation."""

    def __init__(self, exc: ValidationError) -> None:
        super().__init__(str(exc))
        self.details = [
            {'field': '.'.join(str(part) for part in err['loc']), 'message': err['msg']}
            for err in exc.errors()
        ]


def get_mixtape_service() -> MixtapeService:
    return current_app.extensions['mixtape_service']


def _validate(model: Type[InputModel], data) -> InputModel:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise InvalidInput(exc) from exc


def _track_seeds() -> List[str]:
    seeds: List[str] = []
    for raw in request.args.getlist('seed'):
        seeds.extend(piece.strip() for piece in raw.split(',') if piece.strip())
    return seeds


@spotify_bp.errorhandler(MixtapeError)
def _handle_mixtape_error(exc: MixtapeError):
    level = logging.ERROR if exc.http_status >= 500 else logging.INFO
    logger.log(level, "Mixtape request failed (%s): %s", exc.kind.value, exc.message)
    return jsonify(exc.to_dict()), exc.http_status


@spotify_bp.errorhandler(InvalidInput)
def _handle_invalid_input(exc: InvalidInput):
    return jsonify({'error': 'invalid_input', 'details': exc.details}), 400


@spotify_bp.errorhandler(ValidationError)
def _handle_unexpected_validation_error(exc: ValidationError):
    # Raised past the request models, so the data came from Spotify
    logger.exception("Unexpected Spotify data: %s", exc)
    error = MixtapeError(ErrorKind.INTERNAL_ERROR, "Spotify returned data that could not be read")
    return jsonify(error.to_dict()), error.http_status


@spotify_bp.route('/search', methods=['GET'])
@login_required
def search_tracks():
    query = _validate(SearchQuery, request.args.to_dict())
    tracks = get_mixtape_service().search(resolve_spotify_session(), query)
    return jsonify({'tracks': [track.to_wire() for track in tracks]}), 200


@spotify_bp.route('/recommendations', methods=['GET'])
@login_required
def recommendations():
    args = request.args.to_dict()
    args.pop('seed', None)
    args['track_seeds'] = _track_seeds()
    query = _validate(RecommendationQuery, args)
    tracks = get_mixtape_service().get_recommendations(resolve_spotify_session(), query)
    return jsonify({'tracks': [track.to_wire() for track in tracks]}), 200


@spotify_bp.route('/playlists', methods=['GET'])
@login_required
def list_playlists():
    args = request.args.to_dict()
    if 'creator_only' in args:
        args['is_creator_only'] = args.pop('creator_only')
    query = _validate(PlaylistsQuery, args)
    page = get_mixtape_service().get_playlists(resolve_spotify_session(), query)
    return jsonify(page.to_wire()), 200


@spotify_bp.route('/playlists', methods=['POST'])
@login_required
def create_playlist():
    payload = request.get_json(silent=True) or {}
    data = _validate(CreatePlaylistInput, payload)
    created = get_mixtape_service().create_playlist(resolve_spotify_session(), data)
    return jsonify(created.model_dump()), 201


__all__ = ['spotify_bp']
