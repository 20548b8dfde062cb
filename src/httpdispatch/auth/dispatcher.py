"""Authorization header dispatch.

The user writes credentials into the ``Authorization`` header in a
readable form (``Basic alice:secret``, ``Digest alice secret``,
``AWS <key> <secret> ...``, ``Cognito ...``). The dispatcher turns that
header into transport credentials or request hooks, removing it from the
outgoing headers. Headers it does not recognize are sent unchanged.
"""

import logging
from typing import TYPE_CHECKING

from httpdispatch.auth.aws import AwsSignatureHook
from httpdispatch.auth.cognito import resolve_cognito
from httpdispatch.auth.digest import DigestChallengeHook
from httpdispatch.http.headers import HeaderMap

if TYPE_CHECKING:
    from httpdispatch.http.options import TransportOptions

logger = logging.getLogger(__name__)

AUTHORIZATION = 'Authorization'


class AuthDispatcher:
    """Rewrites the ``Authorization`` header into transport directives."""

    async def apply(self, headers: HeaderMap, options: "TransportOptions") -> None:
        """Apply the authorization scheme found in ``headers`` to ``options``.

        Args:
            headers: The cloned outgoing headers; the header is removed from
                here when it is consumed
            options: Transport options receiving credentials or hooks

        Raises:
            AuthResolutionError: If a Cognito token cannot be obtained or an
                AWS header is malformed
        """
        authorization = headers.get(AUTHORIZATION)
        if not authorization:
            return

        tokens = authorization.split()
        if len(tokens) < 2:
            return

        scheme, user, *args = tokens
        scheme = scheme.lower()

        if args:
            if scheme == 'basic':
                headers.remove(AUTHORIZATION)
                options.username = user
                options.password = ' '.join(args)
            elif scheme == 'digest':
                headers.remove(AUTHORIZATION)
                options.after_response.append(DigestChallengeHook(user, ' '.join(args)))
            elif scheme == 'aws':
                hook = AwsSignatureHook.from_authorization(authorization)
                headers.remove(AUTHORIZATION)
                options.before_request.append(hook)
            elif scheme == 'cognito':
                hook = await resolve_cognito(authorization)
                headers.remove(AUTHORIZATION)
                options.before_request.append(hook)
            else:
                return
        elif scheme == 'basic' and ':' in user:
            headers.remove(AUTHORIZATION)
            options.username, options.password = user.split(':', 1)
        else:
            return

        logger.debug(f"Applied {scheme} authorization")
