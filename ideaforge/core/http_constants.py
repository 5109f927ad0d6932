"""Constantes HTTP pour éviter les valeurs magiques dans le code.

Ce module définit les codes de statut HTTP utilisés par l'application pour améliorer la
lisibilité et éviter les valeurs magiques.
"""

HTTP_OK = 200
HTTP_BAD_REQUEST = 400
HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403
HTTP_NOT_FOUND = 404
HTTP_CONFLICT = 409
HTTP_TOO_MANY_REQUESTS = 429
HTTP_INTERNAL_SERVER_ERROR = 500
HTTP_BAD_GATEWAY = 502
HTTP_SERVICE_UNAVAILABLE = 503
