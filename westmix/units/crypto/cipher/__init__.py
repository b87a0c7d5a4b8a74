"""
Implements the block cipher units.
"""
from __future__ import annotations

import abc
import itertools

from typing import ClassVar, Collection

from westmix.lib.crypto import BlockCipherFactory, CipherInterface
from westmix.lib.types import Param, buf
from westmix.units import Arg, Executable, Unit


class CipherUnit(Unit, abstract=True):

    key_size: Collection[int] | None = None
    block_size: int

    def __init__(self, key: Param[buf, Arg.Binary(help='The encryption key.')], **keywords):
        super().__init__(key=key, **keywords)

    @abc.abstractmethod
    def decrypt(self, data: bytearray) -> buf:
        raise NotImplementedError

    @abc.abstractmethod
    def encrypt(self, data: bytearray) -> buf:
        raise NotImplementedError

    def _check_key_size(self):
        ks = self.key_size
        if not ks or len(self.args.key) in ks:
            return
        key_size_iter = iter(ks)
        key_size_options = [str(k) for k in itertools.islice(key_size_iter, 0, 5)]
        try:
            next(key_size_iter)
        except StopIteration:
            pt = '.'
        else:
            pt = ', ...'
            if isinstance(ks, range):
                pt = F'{pt}, {ks.stop - 1}'
        if len(key_size_options) == 1:
            msg = F'{self.name} requires a key size of {key_size_options[0]}'
        else:
            msg = R', '.join(key_size_options)
            msg = F'possible key sizes for {self.name} are: {msg}'
        raise ValueError(F'the given key has an invalid length of {len(self.args.key)} bytes; {msg}{pt}')

    def process(self, data: bytearray) -> buf:
        self._check_key_size()
        return self.decrypt(data)

    def reverse(self, data: bytearray) -> buf:
        self._check_key_size()
        return self.encrypt(data)


class StandardCipherExecutable(Executable):

    _cipher_factory: BlockCipherFactory | None

    def __new__(mcs, name, bases, nmspc, cipher: BlockCipherFactory | None = None):
        return super().__new__(mcs, name, bases, nmspc, abstract=(cipher is None))

    def __init__(_class, name, bases, nmspc, cipher: BlockCipherFactory | None = None):
        super().__init__(name, bases, nmspc, abstract=(cipher is None))
        _class._cipher_factory = cipher
        if cipher is not None:
            _class.block_size = cipher.block_size
            _class.key_size = cipher.key_size


class StandardBlockCipherUnit(CipherUnit, metaclass=StandardCipherExecutable):
    """
    A block cipher unit in ECB mode. The input of the decryption is truncated and the input of the
    encryption is padded with zeros to a multiple of the block size.
    """
    _cipher_factory: ClassVar[BlockCipherFactory]

    def _new_cipher(self) -> CipherInterface:
        self.log_info(lambda: F'encryption key: {bytes(self.args.key).hex()}')
        if cf := self._cipher_factory:
            return cf.new(self.args.key, cf.MODE_ECB)
        raise RuntimeError('The cipher factory for this unit was uninitialized.')

    def encrypt(self, data: bytearray) -> buf:
        if overlap := -len(data) % self.block_size:
            self.log_info(F'padding the input with {overlap} zero bytes to a multiple of the {self.block_size}-byte block size')
            data.extend(bytes(overlap))
        return self._new_cipher().encrypt(data)

    def decrypt(self, data: bytearray) -> buf:
        if overlap := len(data) % self.block_size:
            del data[-overlap:]
            self.log_warn(F'removing {overlap} bytes from the input to make it a multiple of the {self.block_size}-byte block size')
        return self._new_cipher().decrypt(data)
