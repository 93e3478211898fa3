""" Request signing for the secured (managed cloud) deployment mode.

    The signature is an HMAC-SHA1, keyed by the secret key, over the access
    key, the channel, every extension field value already on the header,
    and the body. It therefore has to be computed last, once every other
    extension field is in place.
"""

import base64
import hashlib
import hmac

from . import codes


def payload(command, access_key, channel):
    """ Return the canonical byte string that :func:`signature` covers for
        this *command*. Extension fields contribute their values in their
        current iteration order; None values are skipped.
    """

    parts = list()
    parts.append(access_key.encode())
    parts.append(channel.encode())

    for value in command.header.ext_fields.values():
        if value is None:
            continue
        parts.append(str(value).encode())

    body = command.body
    if body:
        parts.append(body)

    return b''.join(parts)


def signature(command, access_key, secret_key, channel):
    """ Return the base64 encoded HMAC-SHA1 signature for *command*.
    """

    digest = hmac.new(secret_key.encode(), payload(command, access_key, channel), hashlib.sha1)
    return base64.b64encode(digest.digest()).decode()


def sign(command, access_key, secret_key, channel):
    """ Compute the signature for *command* and store it, along with the
        *access_key* and *channel*, in the header's extension fields. The
        *command* is modified in place and also returned.

        Any signature fields from an earlier call are dropped before the
        new signature is computed, so signing twice yields the same result.
    """

    fields = command.header.ext_fields
    for name in (codes.SIGNATURE, codes.ACCESS_KEY, codes.ONS_CHANNEL):
        fields.pop(name, None)

    signed = signature(command, access_key, secret_key, channel)

    fields[codes.SIGNATURE] = signed
    fields[codes.ACCESS_KEY] = access_key
    fields[codes.ONS_CHANNEL] = channel

    return command


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
