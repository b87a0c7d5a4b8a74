"""
Building blocks for the block cipher implementations of this package. A cipher derives from
`westmix.lib.crypto.BlockCipher` and implements the encryption and decryption of a single block;
the `westmix.lib.crypto.CipherMode` that it is created with applies these primitives to buffers
of arbitrary length. Ciphers are usually created by a `westmix.lib.crypto.BlockCipherFactory`.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, ClassVar, Collection

from westmix.lib.types import buf as BufferType

BlockFunction = Callable[[BufferType], BufferType]

CIPHER_MODES: dict[str, type[CipherMode]] = {}


def _register_cipher_mode(cls: type[CipherMode]):
    cls._identifier = len(CIPHER_MODES)
    CIPHER_MODES[cls.__name__] = cls
    return cls


def rotl32(x: int, c: int):
    """
    Rotate the 32-bit integer `x` by `c` positions to the left.
    """
    return ((x << c) | (x >> (0x20 - c))) & 0xFFFFFFFF


class Operation(str, Enum):
    Encrypt = 'encrypt'
    Decrypt = 'decrypt'


class DataUnaligned(ValueError):
    """
    Raised when the input of a cipher is not a multiple of its block size.
    """
    def __init__(self, b: int, k: int) -> None:
        super().__init__(F'Data not aligned to block size {b}, with {k} missing bytes to complete the block.')


class CipherMode(ABC):
    """
    A mode of operation. The `apply` method transforms the data in `src` block by block and
    writes the result to `dst`, which may be the same memory.
    """
    aligned: ClassVar[bool] = True
    _identifier: ClassVar[int]

    @abstractmethod
    def apply(
        self,
        operation: Operation,
        dst: memoryview,
        src: memoryview,
        encrypt_block: BlockFunction,
        decrypt_block: BlockFunction,
        blocksize: int,
    ) -> memoryview:
        ...


@_register_cipher_mode
class ECB(CipherMode):
    """
    The Electronic Codebook mode: every block is transformed independently. This is the mode in
    which the index of an encrypted MIX archive is stored.
    """
    def apply(self, operation, dst, src, encrypt_block, decrypt_block, blocksize):
        transform = encrypt_block if operation is Operation.Encrypt else decrypt_block
        for k in range(0, len(src) - len(src) % blocksize, blocksize):
            dst[k:k + blocksize] = transform(src[k:k + blocksize])
        return dst


class CipherInterface(ABC):
    """
    The interface shared by all ciphers that can be used by the cipher units.
    """
    key_size: Collection[int]
    block_size: int

    @abstractmethod
    def encrypt(self, data: BufferType) -> BufferType:
        ...

    @abstractmethod
    def decrypt(self, data: BufferType) -> BufferType:
        ...


class BlockCipherFactory:
    """
    Creates `westmix.lib.crypto.BlockCipher` instances from a key and a mode identifier. Like the
    cipher modules of PyCryptodome, a factory provides a `new` method and one `MODE_*` attribute
    per registered cipher mode.
    """
    cipher: type[BlockCipher]

    def __init__(self, cipher: type[BlockCipher]):
        self.cipher = cipher
        self._modes = list(CIPHER_MODES.values())
        for name, mode in CIPHER_MODES.items():
            setattr(self, F'MODE_{name}', mode._identifier)

    def new(self, key: BufferType, mode: int | None = None) -> BlockCipher:
        if mode is None:
            mode = ECB._identifier
        return self.cipher(key, self._modes[mode]())

    @property
    def name(self):
        return self.cipher.__name__

    @property
    def key_size(self) -> Collection[int]:
        return self.cipher.key_size

    @property
    def block_size(self) -> int:
        return self.cipher.block_size


class BlockCipher(CipherInterface, ABC):
    """
    Base class for block ciphers. Subclasses define `block_size` and `key_size` and implement
    the two single block primitives. Writable input buffers are transformed in place.
    """
    key: BufferType
    mode: CipherMode

    def __init__(self, key: BufferType, mode: CipherMode | None = None):
        if len(key) not in self.key_size:
            raise ValueError(F'The key size {len(key)} is not supported by {self.__class__.__name__.lower()}.')
        self.key = key
        self.mode = mode or ECB()

    @abstractmethod
    def block_encrypt(self, data: BufferType) -> BufferType:
        raise NotImplementedError

    @abstractmethod
    def block_decrypt(self, data: BufferType) -> BufferType:
        raise NotImplementedError

    def _apply_blockwise(self, operation: Operation, data: BufferType) -> memoryview:
        block_size = self.block_size
        if (missing := -len(data) % block_size) and self.mode.aligned:
            raise DataUnaligned(block_size, missing)
        src = memoryview(data)
        dst = memoryview(bytearray(src)) if src.readonly else src
        return self.mode.apply(operation, dst, src, self.block_encrypt, self.block_decrypt, block_size)

    def encrypt(self, data: BufferType) -> memoryview:
        return self._apply_blockwise(Operation.Encrypt, data)

    def decrypt(self, data: BufferType) -> memoryview:
        return self._apply_blockwise(Operation.Decrypt, data)
