"""TLS context construction for the broker session."""

import ssl
from typing import Optional

from udp_mqtt_gateway.config.gateway_config import GatewayConfig, TlsVersion

TLS_VERSIONS = {
    TlsVersion.TLS_1_0: ssl.TLSVersion.TLSv1,
    TlsVersion.TLS_1_1: ssl.TLSVersion.TLSv1_1,
    TlsVersion.TLS_1_2: ssl.TLSVersion.TLSv1_2,
}


def build_tls_context(config: GatewayConfig) -> Optional[ssl.SSLContext]:
    """Build the client SSL context, or None when the session is plain TCP.

    Empty paths are left out so the system defaults apply.
    """
    if not config.tls_enabled:
        return None

    tls = config.tls
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)

    version = TLS_VERSIONS.get(tls.tls_version)
    if version is not None:
        context.minimum_version = version
        context.maximum_version = version

    # check_hostname has to be off before verification can be disabled
    context.check_hostname = tls.server_cert_auth and tls.verify_hostname
    context.verify_mode = ssl.CERT_REQUIRED if tls.server_cert_auth else ssl.CERT_NONE

    if tls.trust_store:
        context.load_verify_locations(cafile=tls.trust_store)
    elif tls.server_cert_auth:
        context.load_default_certs()

    if tls.key_store:
        context.load_cert_chain(
            certfile=tls.key_store,
            keyfile=tls.private_key or None,
            password=tls.private_key_password or None,
        )

    return context
