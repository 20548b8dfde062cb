"""Per-host client certificate resolution.

Certificates are configured per ``host[:port]`` with paths that may be
absolute or relative. Relative paths resolve against the workspace root,
falling back to the directory of the request file being sent. A path that
cannot be found is reported with a warning and skipped; it never fails the
request.
"""

import logging
import os
import ssl
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.serialization import pkcs12

from httpdispatch.config import Settings
from httpdispatch.utils.file import read_existing_file
from httpdispatch.utils.text import get_host

logger = logging.getLogger(__name__)


@dataclass
class WorkspaceContext:
    """Where relative paths are resolved from.

    Attributes:
        root_path: Workspace root directory, as a path or ``file://`` URI
        current_file: Path of the request file currently being sent
    """

    root_path: Optional[str] = None
    current_file: Optional[str] = None

    @property
    def root_dir(self) -> Optional[Path]:
        if not self.root_path:
            return None
        if self.root_path.startswith('file://'):
            return Path(unquote(urlparse(self.root_path).path))
        return Path(self.root_path)


@dataclass
class Certificate:
    """Client certificate material read from disk."""

    cert: Optional[bytes] = None
    key: Optional[bytes] = None
    pfx: Optional[bytes] = None
    passphrase: Optional[str] = None

    def load_into(self, context: ssl.SSLContext) -> None:
        """Install this certificate into an SSL context.

        ``ssl`` only loads key material from files, so the PEM data is written
        to a private temporary directory for the duration of the call. A PFX
        bundle takes precedence over separate cert/key files.
        """
        cert, key, password = self.cert, self.key, self.passphrase
        if self.pfx is not None:
            cert, key = self._pfx_to_pem()
            password = None

        if cert is None:
            return

        with tempfile.TemporaryDirectory(prefix='httpdispatch-') as tmp_dir:
            cert_file = Path(tmp_dir) / 'cert.pem'
            cert_file.write_bytes(cert)
            key_file = None
            if key is not None:
                key_file = Path(tmp_dir) / 'key.pem'
                key_file.write_bytes(key)
            context.load_cert_chain(
                certfile=str(cert_file),
                keyfile=str(key_file) if key_file else None,
                password=password,
            )

    def _pfx_to_pem(self):
        password = self.passphrase.encode('utf-8') if self.passphrase else None
        private_key, certificate, chain = pkcs12.load_key_and_certificates(self.pfx, password)

        cert_pem = b''
        for item in [certificate, *(chain or [])]:
            if item is not None:
                cert_pem += item.public_bytes(serialization.Encoding.PEM)

        key_pem = None
        if private_key is not None:
            key_pem = private_key.private_bytes(
                serialization.Encoding.PEM,
                serialization.PrivateFormat.PKCS8,
                serialization.NoEncryption(),
            )
        return cert_pem or None, key_pem


def create_ssl_context(verify: bool = False, certificate: Optional[Certificate] = None) -> ssl.SSLContext:
    """Create the SSL context for the server connection.

    Certificate material that ``ssl`` or ``cryptography`` rejects is logged
    as a warning and the context is returned without a client certificate.

    Args:
        verify: Whether to validate the server certificate
        certificate: Client certificate to present, if any

    Returns:
        Configured ssl.SSLContext
    """
    context = ssl.create_default_context()
    if not verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE

    if certificate is not None:
        try:
            certificate.load_into(context)
        except (ssl.SSLError, ValueError) as e:
            logger.warning(f"Client certificate could not be loaded, sending without it: {e}")

    return context


class CertificateResolver:
    """Looks up and reads the client certificate configured for a URL's host."""

    def __init__(self, workspace: Optional[WorkspaceContext] = None):
        self.workspace = workspace or WorkspaceContext()

    def resolve(self, url: str, settings: Settings) -> Optional[Certificate]:
        """Resolve the certificate for ``url``.

        Args:
            url: Request URL; its ``host[:port]`` is the lookup key, verbatim
            settings: Settings holding the host certificate mapping

        Returns:
            Certificate, or None when no certificate is configured for the host
        """
        host = get_host(url)
        if not host or host not in settings.host_certificates:
            return None

        config = settings.host_certificates[host]
        logger.debug(f"Using client certificate configured for {host}")
        return Certificate(
            cert=self.read_certificate(config.cert),
            key=self.read_certificate(config.key),
            pfx=self.read_certificate(config.pfx),
            passphrase=config.passphrase,
        )

    def read_certificate(self, path: Optional[str]) -> Optional[bytes]:
        """Read one certificate file given an absolute or relative path."""
        if path is None:
            return None

        if os.path.isabs(path):
            return self._read_or_warn(Path(path), path)

        root_dir = self.workspace.root_dir
        if root_dir is not None:
            return self._read_or_warn(root_dir / path, path)

        if not self.workspace.current_file:
            return None

        return self._read_or_warn(Path(self.workspace.current_file).parent / path, path)

    @staticmethod
    def _read_or_warn(resolved: Path, configured: str) -> Optional[bytes]:
        data = read_existing_file(resolved)
        if data is None:
            logger.warning(f"Certificate path {configured} doesn't exist, please make sure it exists.")
        return data
