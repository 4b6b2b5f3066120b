from flask_jwt_extended import create_access_token


def issue_access_token(user):
    """Signed, expiring access token for a user; expiry comes from JWT_ACCESS_TOKEN_EXPIRES."""
    return create_access_token(identity=user.email, additional_claims={'name': user.name})
