from __future__ import annotations

from westmix.lib.blowfish import BlowfishFactory
from westmix.units.crypto.cipher import StandardBlockCipherUnit


class blowfish(StandardBlockCipherUnit, cipher=BlowfishFactory):
    """
    Blowfish encryption and decryption in ECB mode. The big-endian Blowfish variant is used, which
    is the one that protects the index of encrypted MIX archives.
    """
