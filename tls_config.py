import ssl

# Only consulted for pre-1.3 handshakes, which the minimum version rules out.
CIPHERS = ":".join([
    "ECDHE-RSA-AES256-GCM-SHA384",
    "ECDHE-RSA-AES256-SHA",
    "AES256-GCM-SHA384",
    "AES256-SHA",
])


def make_ssl_context(curve: str = "secp384r1") -> ssl.SSLContext:
    """Server-side context: TLS 1.3 only, restricted ciphers and curve."""
    ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    ctx.minimum_version = ssl.TLSVersion.TLSv1_3
    ctx.options |= ssl.OP_CIPHER_SERVER_PREFERENCE
    ctx.set_ciphers(CIPHERS)
    ctx.set_ecdh_curve(curve)
    return ctx


def load_ssl_context(cert_file: str, key_file: str, curve: str = "secp384r1") -> ssl.SSLContext:
    ctx = make_ssl_context(curve)
    ctx.load_cert_chain(certfile=cert_file, keyfile=key_file)
    return ctx
