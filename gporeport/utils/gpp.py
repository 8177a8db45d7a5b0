import logging
import binascii
from base64 import b64decode

from Crypto.Cipher import AES
from Crypto.Util.Padding import unpad

# AES-256 key published by Microsoft for Group Policy Preferences passwords
# https://learn.microsoft.com/en-us/openspecs/windows_protocols/ms-gppref/2c15cbf0-f086-4c74-8b70-1f2fa45dd4be
GPP_KEY = bytes.fromhex("4e9906e8fcb66cc9faf49310620ffee8f496e806cc057990209b09a433b66c1b")


def decrypt_gpppassword(b64_password):
    """
    Decrypt GPP Password
    """

    if not b64_password:
        return None

    try:
        # Decode base64 cpassword
        b64_password += "=" * ((4 - len(b64_password) % 4) % 4)
        cpassword = b64decode(b64_password)

        # Decrypt the password
        ctx = AES.new(GPP_KEY, AES.MODE_CBC, b"\x00" * 16)
        decrypted_password = unpad(ctx.decrypt(cpassword), ctx.block_size)

    except (binascii.Error, ValueError) as error:
        logging.debug("Could not decrypt cpassword %s: %s", b64_password, error)
        return None

    return decrypted_password.decode("utf-16-le")
