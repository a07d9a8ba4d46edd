"""Declarative request schemas and aggregated validation.

A :class:`RequestSchema` lists the query parameters and body properties an
endpoint accepts.  :func:`validate_request` checks a request against it and
collects *every* violation into a single :class:`~app.errors.BadRequest`
whose ``info`` maps field name to reason, so a client can fix all problems
in one round trip.
"""
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from .errors import BadRequest

# JSON type name -> accepted Python types
_JSON_TYPES = {
    'string': (str,),
    'number': (int, float),
    'integer': (int,),
    'boolean': (bool,),
    'object': (dict,),
    'array': (list,),
}


def json_type_name(value: Any) -> str:
    """Return the JSON type name of *value* (``bool`` is not a number)."""
    if isinstance(value, bool):
        return 'boolean'
    if isinstance(value, (int, float)):
        return 'number'
    if isinstance(value, str):
        return 'string'
    if isinstance(value, dict):
        return 'object'
    if isinstance(value, list):
        return 'array'
    return 'null' if value is None else type(value).__name__


def _matches(value: Any, type_name: str) -> bool:
    if isinstance(value, bool) and type_name != 'boolean':
        return False
    return isinstance(value, _JSON_TYPES[type_name])


def _is_missing(value: Any) -> bool:
    return value is None or value == ''


@dataclass(frozen=True)
class Field:
    type: str = 'string'
    required: bool = False


@dataclass(frozen=True)
class QuerySchema:
    params: Tuple[str, ...] = ()
    required: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RequestSchema:
    query: Optional[QuerySchema] = None
    body: Optional[Dict[str, Field]] = None


def collect_violations(schema: RequestSchema,
                       query: Optional[Mapping[str, Any]] = None,
                       body: Optional[Mapping[str, Any]] = None) -> Dict[str, str]:
    """Return the ``{field: reason}`` map of every violation (empty if valid)."""
    info: Dict[str, str] = {}
    query = query or {}
    body = body or {}

    if schema.query is not None:
        for param in schema.query.required:
            if _is_missing(query.get(param)):
                info[param] = 'required parameter missing'
        for param in query:
            if param not in schema.query.params:
                info[param] = 'unknown query parameter'

    if schema.body is not None:
        for prop, field_def in schema.body.items():
            value = body.get(prop)
            if _is_missing(value):
                if field_def.required:
                    info[prop] = 'required property missing'
            elif not _matches(value, field_def.type):
                info[prop] = (f"wrong type. expected {field_def.type}. "
                              f"instead got {json_type_name(value)}")
        for prop in body:
            if prop not in schema.body:
                info[prop] = 'unknown body property'

    return info


def validate_request(schema: RequestSchema,
                     query: Optional[Mapping[str, Any]] = None,
                     body: Optional[Mapping[str, Any]] = None) -> None:
    """Raise :class:`BadRequest` carrying all violations, if there are any."""
    info = collect_violations(schema, query, body)
    if info:
        raise BadRequest(info)


# ---------------------------------------------------------------------------
# Per-endpoint schemas
# ---------------------------------------------------------------------------

# Sort keys accepted by the Board Game Atlas search endpoint
ORDER_BY_FIELDS = (
    'rank', 'trending', 'price', 'discount', 'name', 'year_published',
    'min_age', 'min_playtime', 'max_playtime', 'min_players', 'max_players',
)

SEARCH_GAMES = RequestSchema(
    query=QuerySchema(params=('gameName', 'limit', 'order_by', 'ascending'),
                      required=('gameName',)),
)

CREATE_USER = RequestSchema(body={
    'userId': Field('string', required=True),
    'userName': Field('string', required=True),
})

CREATE_GROUP = RequestSchema(body={
    'groupId': Field('string'),
    'groupName': Field('string', required=True),
    'groupDescription': Field('string', required=True),
})

EDIT_GROUP = RequestSchema(body={
    'newGroupName': Field('string'),
    'newGroupDescription': Field('string'),
})

ADD_GAME = RequestSchema(body={
    'gameId': Field('string', required=True),
})
