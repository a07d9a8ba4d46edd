#!/usr/bin/env python3
"""
BORGA Web API - Flask adapter over :class:`app.services.BorgaService`.

Routes read the bearer token and request fields, validate them against the
declarative schemas in :mod:`app.schemas`, call the service and render the
result as JSON.  This module alone decides how an error kind maps to an HTTP
status code.
"""

import logging
from functools import wraps
from typing import Dict, Optional

from flask import Flask, g, jsonify, request
from werkzeug.exceptions import HTTPException

from app import schemas
from app.errors import BadRequest, BorgaError, Failure, NotFound
from app.schemas import RequestSchema
from app.services import BorgaService

web_logger = logging.getLogger('borga.web')

STATUS_BY_ERROR: Dict[str, int] = {
    'MISSING_PARAM': 400,
    'BAD_REQUEST': 400,
    'UNAUTHENTICATED': 401,
    'NOT_FOUND': 404,
    'ALREADY_EXISTS': 409,
    'EXT_SVC_FAIL': 502,
    'FAIL': 500,
}


def get_bearer_token(auth_header: Optional[str]) -> Optional[str]:
    """Return the token of an ``Authorization: Bearer <token>`` header, if any."""
    if not auth_header:
        return None
    parts = auth_header.strip().split(None, 1)
    if len(parts) == 2 and parts[0].lower() == 'bearer':
        return parts[1].strip() or None
    return None


def error_response(err: BorgaError):
    status = STATUS_BY_ERROR.get(err.name, 500)
    if status == 500:
        web_logger.error("Request failed: %s", err, exc_info=err)
    return jsonify({'cause': err.to_dict()}), status


def validated(schema: RequestSchema):
    """Decorator validating the query string and JSON body against *schema*."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            body = {}
            if schema.body is not None:
                body = request.get_json(silent=True)
                if body is None:
                    body = {}
                elif not isinstance(body, dict):
                    raise BadRequest({'body': 'expected a JSON object'})
            schemas.validate_request(schema, request.args, body)
            g.body = body
            return f(*args, **kwargs)
        return decorated_function
    return decorator


_SWAGGER_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>BORGA API Documentation</title>
  <link rel="stylesheet"
        href="https://unpkg.com/swagger-ui-dist@5/swagger-ui.css">
</head>
<body>
  <div id="swagger-ui"></div>
  <script src="https://unpkg.com/swagger-ui-dist@5/swagger-ui-bundle.js"></script>
  <script>
    SwaggerUIBundle({{
      url: "{openapi_url}",
      dom_id: "#swagger-ui",
      presets: [SwaggerUIBundle.presets.apis, SwaggerUIBundle.SwaggerUIStandalonePreset],
      layout: "BaseLayout",
      deepLinking: true,
    }});
  </script>
</body>
</html>"""


def create_app(service: BorgaService, config: Optional[Dict] = None) -> Flask:
    """Build the Flask application serving the BORGA REST API under ``/api``.

    Args:
        service: The service every route delegates to.
        config:  Optional extra Flask config values (e.g. ``{'TESTING': True}``).
    """
    app = Flask(__name__)
    app.json.sort_keys = False
    if config:
        app.config.update(config)

    # ------------------------------------------------------------------
    # Request plumbing
    # ------------------------------------------------------------------

    @app.before_request
    def extract_token():
        g.token = get_bearer_token(request.headers.get('Authorization'))

    @app.errorhandler(BorgaError)
    def on_borga_error(err: BorgaError):
        return error_response(err)

    @app.errorhandler(HTTPException)
    def on_http_error(err: HTTPException):
        if err.code == 404:
            cause = NotFound({'method': request.method, 'path': request.path})
        else:
            cause = BadRequest({'method': request.method, 'path': request.path,
                                'reason': err.description})
        return jsonify({'cause': cause.to_dict()}), err.code

    @app.errorhandler(Exception)
    def on_unexpected_error(err: Exception):
        web_logger.error("Unhandled error on %s %s", request.method, request.path, exc_info=err)
        return jsonify({'cause': Failure({'reason': str(err)}).to_dict()}), 500

    # ------------------------------------------------------------------
    # Games
    # ------------------------------------------------------------------

    @app.route('/api/games/popular', methods=['GET'])
    def get_popular_games():
        popular = service.get_popular_games()
        return jsonify({'popularGames': [
            {'id': entry['game']['id'], 'name': entry['game']['name'], 'count': entry['count']}
            for entry in popular
        ]})

    @app.route('/api/games/search', methods=['GET'])
    @validated(schemas.SEARCH_GAMES)
    def search_games_by_name():
        games = service.search_games_by_name(
            request.args.get('gameName'),
            limit=request.args.get('limit'),
            order_by=request.args.get('order_by'),
            ascending=request.args.get('ascending'),
        )
        return jsonify({'games': games})

    @app.route('/api/games/<game_id>', methods=['GET'])
    def get_game_details(game_id):
        return jsonify({'game': service.get_game_details(game_id)})

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    @app.route('/api/user', methods=['POST'])
    @validated(schemas.CREATE_USER)
    def create_new_user():
        user_info = service.create_new_user(g.body['userId'], g.body['userName'])
        return jsonify(user_info), 201

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------

    @app.route('/api/user/<user_id>/groups', methods=['POST'])
    @validated(schemas.CREATE_GROUP)
    def create_group(user_id):
        group_info = service.create_group(
            g.token, user_id,
            g.body['groupName'], g.body['groupDescription'],
            group_id=g.body.get('groupId'),
        )
        return jsonify(group_info), 201

    @app.route('/api/user/<user_id>/groups', methods=['GET'])
    def list_groups(user_id):
        return jsonify(service.list_user_groups(g.token, user_id))

    @app.route('/api/user/<user_id>/groups/<group_id>', methods=['GET'])
    def get_group_details(user_id, group_id):
        return jsonify(service.get_group_details(g.token, user_id, group_id))

    @app.route('/api/user/<user_id>/groups/<group_id>', methods=['POST'])
    @validated(schemas.EDIT_GROUP)
    def edit_group(user_id, group_id):
        group_info = service.edit_group(
            g.token, user_id, group_id,
            new_group_name=g.body.get('newGroupName'),
            new_group_description=g.body.get('newGroupDescription'),
        )
        return jsonify(group_info)

    @app.route('/api/user/<user_id>/groups/<group_id>', methods=['DELETE'])
    def delete_group(user_id, group_id):
        return jsonify(service.delete_group(g.token, user_id, group_id))

    @app.route('/api/user/<user_id>/groups/<group_id>/games', methods=['POST'])
    @validated(schemas.ADD_GAME)
    def add_game_to_group(user_id, group_id):
        game = service.add_game_to_group(g.token, user_id, group_id, g.body['gameId'])
        return jsonify(game), 201

    @app.route('/api/user/<user_id>/groups/<group_id>/games/<game_id>', methods=['DELETE'])
    def remove_game_from_group(user_id, group_id, game_id):
        return jsonify(service.remove_game_from_group(g.token, user_id, group_id, game_id))

    # ------------------------------------------------------------------
    # API Documentation — OpenAPI 3.0 + Swagger UI
    # ------------------------------------------------------------------

    @app.route('/api/openapi.json')
    def api_openapi_spec():
        """Serve the OpenAPI 3.0 specification as JSON."""
        from openapi_spec import build_spec
        return jsonify(build_spec(server_url=request.url_root.rstrip('/')))

    @app.route('/api/docs')
    def api_swagger_ui():
        """Serve an interactive Swagger UI for the BORGA REST API."""
        html = _SWAGGER_HTML.format(openapi_url='/api/openapi.json')
        return html, 200, {'Content-Type': 'text/html; charset=utf-8'}

    return app
