"""Amazon Cognito user pool authentication.

The authorization line has the form::

    Cognito <username> <password> <region> <userPoolId> <clientId>

The token is fetched once, before the request is built, and then sent as
the ``Authorization`` header.
"""

import asyncio
import logging

import boto3
import httpx
from botocore import UNSIGNED
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from httpdispatch.errors import AuthResolutionError

logger = logging.getLogger(__name__)


class CognitoTokenHook:
    """Before-request hook that sends a Cognito access token."""

    def __init__(self, token: str):
        self.token = token

    def __call__(self, request: httpx.Request) -> None:
        request.headers['Authorization'] = self.token


def fetch_access_token(username: str, password: str, region: str, user_pool_id: str, client_id: str) -> str:
    """Authenticate against a Cognito user pool and return the access token.

    Uses the ``USER_PASSWORD_AUTH`` flow with an unsigned client, so no AWS
    credentials are required.

    Raises:
        AuthResolutionError: If authentication fails or Cognito answers with
            a further challenge instead of tokens
    """
    client = boto3.client(
        'cognito-idp',
        region_name=region,
        config=BotoConfig(signature_version=UNSIGNED),
    )
    try:
        response = client.initiate_auth(
            ClientId=client_id,
            AuthFlow='USER_PASSWORD_AUTH',
            AuthParameters={'USERNAME': username, 'PASSWORD': password},
        )
    except (BotoCoreError, ClientError) as e:
        raise AuthResolutionError(f"Cognito authentication failed for pool {user_pool_id}: {e}") from e

    result = response.get('AuthenticationResult')
    if not result or 'AccessToken' not in result:
        challenge = response.get('ChallengeName', 'unknown')
        raise AuthResolutionError(f"Cognito requires an unsupported challenge: {challenge}")

    return result['AccessToken']


async def resolve_cognito(authorization: str) -> CognitoTokenHook:
    """Obtain a Cognito token for an authorization line and wrap it in a hook.

    The boto3 call is blocking, so it runs in a worker thread.

    Raises:
        AuthResolutionError: If the line is incomplete or authentication fails
    """
    tokens = authorization.split()
    if len(tokens) < 6:
        raise AuthResolutionError(
            "Cognito authorization requires username, password, region, user pool id and client id"
        )

    _, username, password, region, user_pool_id, client_id = tokens[:6]
    logger.debug(f"Requesting Cognito token for {username} in {user_pool_id}")
    token = await asyncio.to_thread(fetch_access_token, username, password, region, user_pool_id, client_id)
    return CognitoTokenHook(token)
