"""AWS Signature Version 4 request signing.

The authorization line has the form::

    AWS <accessKeyId> <secretAccessKey> [token:<sessionToken>] [region:<region>] [service:<service>]

Region and service default to what the ``*.amazonaws.com`` host name says,
and to ``us-east-1`` when it says nothing about the region.
"""

import logging
from typing import Optional, Tuple

import httpx
from botocore.auth import SigV4Auth
from botocore.awsrequest import AWSRequest
from botocore.credentials import Credentials
from botocore.exceptions import BotoCoreError

from httpdispatch.errors import AuthResolutionError

logger = logging.getLogger(__name__)

DEFAULT_REGION = 'us-east-1'
_SIGNED_HEADERS = ('Authorization', 'X-Amz-Date', 'X-Amz-Security-Token', 'X-Amz-Content-SHA256')


def infer_region_and_service(host: str) -> Tuple[str, str]:
    """Guess the signing region and service from a host name.

    Args:
        host: Request host, e.g. ``dynamodb.eu-west-1.amazonaws.com``

    Returns:
        Tuple of (region, service)
    """
    labels = host.lower().split('.')
    if 'amazonaws' in labels:
        labels = labels[:labels.index('amazonaws')]
        if len(labels) >= 2 and '-' in labels[-1] and labels[-1] != 'execute-api':
            return labels[-1], labels[-2]
        if labels:
            return DEFAULT_REGION, labels[-1]
    return DEFAULT_REGION, labels[0]


class AwsSignatureHook:
    """Before-request hook adding SigV4 headers to the outgoing request."""

    def __init__(
        self,
        access_key: str,
        secret_key: str,
        session_token: Optional[str] = None,
        region: Optional[str] = None,
        service: Optional[str] = None,
    ):
        self.credentials = Credentials(access_key, secret_key, session_token)
        self.region = region
        self.service = service

    @classmethod
    def from_authorization(cls, authorization: str) -> "AwsSignatureHook":
        """Parse an ``AWS ...`` authorization header value.

        Raises:
            AuthResolutionError: If the access key or secret key is missing
        """
        _, *tokens = authorization.split()
        if len(tokens) < 2:
            raise AuthResolutionError("AWS authorization requires an access key id and a secret access key")

        access_key, secret_key, *options = tokens
        params = {}
        for option in options:
            name, sep, value = option.partition(':')
            if sep and name.lower() in ('token', 'region', 'service'):
                params[name.lower()] = value

        return cls(
            access_key,
            secret_key,
            session_token=params.get('token'),
            region=params.get('region'),
            service=params.get('service'),
        )

    def __call__(self, request: httpx.Request) -> None:
        region, service = infer_region_and_service(request.url.host)
        region = self.region or region
        service = self.service or service

        aws_request = AWSRequest(
            method=request.method,
            url=str(request.url),
            data=request.content,
            headers=dict(request.headers.items()),
        )
        try:
            SigV4Auth(self.credentials, service, region).add_auth(aws_request)
        except BotoCoreError as e:
            raise AuthResolutionError(f"Failed to compute AWS signature: {e}") from e

        for name in _SIGNED_HEADERS:
            if name in aws_request.headers:
                request.headers[name] = aws_request.headers[name]

        logger.debug(f"Signed {request.method} {request.url} for {service} in {region}")
