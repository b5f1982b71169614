"""Key and certificate generation plugin.

Generates RSA private keys and self-signed X.509 certificates in PEM format
with ``cryptography``. Certificate output is a JSON object using the
Kubernetes TLS secret key names (``tls.crt`` / ``tls.key``) so it can be fed
straight into ``SecretYamlUpdater.update_secrets``.
"""

from __future__ import annotations

import datetime
import json
import logging
from pathlib import Path
from typing import Annotated, Tuple

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from ..capabilities.native import native_function

logger = logging.getLogger(__name__)

CERT_KEY = "tls.crt"
PRIVATE_KEY = "tls.key"


def _new_key(key_size: int) -> rsa.RSAPrivateKey:
    if key_size < 2048:
        raise ValueError(f"key_size must be at least 2048 bits, got {key_size}")
    return rsa.generate_private_key(public_exponent=65537, key_size=key_size)


def _key_pem(key: rsa.RSAPrivateKey) -> str:
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")


def build_self_signed(common_name: str, days_valid: int, key_size: int) -> Tuple[str, str]:
    """Return ``(certificate_pem, private_key_pem)`` for a new self-signed certificate."""
    if not common_name.strip():
        raise ValueError("common_name must not be empty")
    if days_valid <= 0:
        raise ValueError(f"days_valid must be positive, got {days_valid}")

    key = _new_key(key_size)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now)
        .not_valid_after(now + datetime.timedelta(days=days_valid))
        .add_extension(x509.SubjectAlternativeName([x509.DNSName(common_name)]), critical=False)
        .add_extension(x509.BasicConstraints(ca=False, path_length=None), critical=True)
        .sign(key, hashes.SHA256())
    )
    return cert.public_bytes(serialization.Encoding.PEM).decode("ascii"), _key_pem(key)


class KeyAndCertGenerator:
    """Generate private keys and self-signed certificates."""

    @native_function("Generate an RSA private key and return it in PEM format")
    def generate_private_key(
        self,
        key_size: Annotated[int, "RSA key size in bits"] = 2048,
    ) -> str:
        return _key_pem(_new_key(int(key_size)))

    @native_function(
        "Generate a self-signed certificate and its private key; returns a JSON object with tls.crt and tls.key"
    )
    def generate_self_signed_certificate(
        self,
        common_name: Annotated[str, "Certificate common name (host name)"],
        days_valid: Annotated[int, "Number of days the certificate is valid"] = 365,
        key_size: Annotated[int, "RSA key size in bits"] = 2048,
    ) -> str:
        cert_pem, key_pem = build_self_signed(common_name, int(days_valid), int(key_size))
        logger.info(f"Generated self-signed certificate for CN={common_name}")
        return json.dumps({CERT_KEY: cert_pem, PRIVATE_KEY: key_pem})

    @native_function("Generate a self-signed certificate and write tls.crt and tls.key into a directory")
    def write_key_and_cert(
        self,
        common_name: Annotated[str, "Certificate common name (host name)"],
        output_dir: Annotated[str, "Directory that receives tls.crt and tls.key"],
        days_valid: Annotated[int, "Number of days the certificate is valid"] = 365,
    ) -> str:
        cert_pem, key_pem = build_self_signed(common_name, int(days_valid), 2048)
        out = Path(output_dir)
        out.mkdir(parents=True, exist_ok=True)
        (out / CERT_KEY).write_text(cert_pem, encoding="ascii")
        key_path = out / PRIVATE_KEY
        key_path.write_text(key_pem, encoding="ascii")
        key_path.chmod(0o600)
        logger.info(f"Wrote certificate and key for CN={common_name} to {out}")
        return str(out)
