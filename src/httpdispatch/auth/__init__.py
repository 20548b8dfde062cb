"""Authorization schemes understood by the dispatcher."""

from httpdispatch.auth.aws import AwsSignatureHook
from httpdispatch.auth.cognito import CognitoTokenHook, resolve_cognito
from httpdispatch.auth.digest import DigestChallengeHook
from httpdispatch.auth.dispatcher import AuthDispatcher

__all__ = [
    "AuthDispatcher",
    "AwsSignatureHook",
    "CognitoTokenHook",
    "DigestChallengeHook",
    "resolve_cognito",
]
