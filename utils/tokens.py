import logging

import jwt
from flask import current_app

logger = logging.getLogger(__name__)


def decode_jwt(token):
    """Decode and validate a JWT issued by the auth service; None when it is expired or invalid."""
    try:
        return jwt.decode(token, current_app.config["SECRET_KEY"], algorithms=["HS256"])
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired token")
        return None
    except jwt.InvalidTokenError:
        logger.info("Rejected invalid token")
        return None
