"""Keyed signatures authorizing connections, API calls and subscriptions.

Every signature is an HMAC-SHA256 over the node secret, rendered as
lowercase hex. Each field is fed to the HMAC as its own update so that the
field boundaries come from the fixed arity of the domain rather than from a
separator; clients computing a matching signature out of process must write
the same fields in the same order.

    connection token:  project_key, user, timestamp, info
    api sign:          project_key, encoded_data
    channel sign:      client, channel, channel_data

"""
import hashlib
import hmac


EMPTY_INFO = "{}"
SIGNATURE_LENGTH = 2 * hashlib.sha256().digest_size


def _to_bytes(value):
    if value is None:
        return b""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return str(value).encode("utf-8")


def _sign(secret, *fields):
    mac = hmac.new(_to_bytes(secret), digestmod=hashlib.sha256)
    for field in fields:
        mac.update(_to_bytes(field))
    return mac.hexdigest()


def _matches(expected, provided):
    if isinstance(provided, str):
        try:
            provided = provided.encode("ascii")
        except UnicodeEncodeError:
            return False
    elif isinstance(provided, (bytes, bytearray)):
        provided = bytes(provided)
    else:
        return False
    return hmac.compare_digest(expected.encode("ascii"), provided)


def generate_connection_token(secret, project_key, user, timestamp, info=""):
    """Return the token a client presents when connecting.

    An empty ``info`` is signed as the empty JSON object ``{}``.

    """
    if not info:
        info = EMPTY_INFO
    return _sign(secret, project_key, user, timestamp, info)


def check_connection_token(secret, project_key, user, timestamp, info, provided_token):
    expected = generate_connection_token(secret, project_key, user, timestamp, info)
    return _matches(expected, provided_token)


def generate_api_sign(secret, project_key, encoded_data):
    """Return the sign covering a serialized API request body in full."""
    return _sign(secret, project_key, encoded_data)


def check_api_sign(secret, project_key, encoded_data, provided_sign):
    expected = generate_api_sign(secret, project_key, encoded_data)
    return _matches(expected, provided_sign)


def generate_channel_sign(secret, client, channel, channel_data):
    """Return the sign allowing ``client`` to subscribe to a private channel."""
    return _sign(secret, client, channel, channel_data)


def check_channel_sign(secret, client, channel, channel_data, provided_sign):
    expected = generate_channel_sign(secret, client, channel, channel_data)
    return _matches(expected, provided_sign)


class SignatureService(object):
    """The signature operations bound to one node secret.

    Holds nothing but the secret, so a single instance may be shared by any
    number of concurrent callers.

    """

    def __init__(self, secret):
        self._secret = _to_bytes(secret)

    def generate_connection_token(self, project_key, user, timestamp, info=""):
        return generate_connection_token(self._secret, project_key, user, timestamp, info)

    def check_connection_token(self, project_key, user, timestamp, info, provided_token):
        return check_connection_token(
            self._secret, project_key, user, timestamp, info, provided_token)

    def generate_api_sign(self, project_key, encoded_data):
        return generate_api_sign(self._secret, project_key, encoded_data)

    def check_api_sign(self, project_key, encoded_data, provided_sign):
        return check_api_sign(self._secret, project_key, encoded_data, provided_sign)

    def generate_channel_sign(self, client, channel, channel_data):
        return generate_channel_sign(self._secret, client, channel, channel_data)

    def check_channel_sign(self, client, channel, channel_data, provided_sign):
        return check_channel_sign(
            self._secret, client, channel, channel_data, provided_sign)
