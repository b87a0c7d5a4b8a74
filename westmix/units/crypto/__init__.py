"""
Cryptographic primitives used by MIX archives: the Blowfish cipher, the RSA key block, and the
file name hash.
"""
