# SPDX-License-Identifier: GPL-2.0-only
from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import List, NamedTuple

BOOT_MAGIC = 'ANDROID!'.encode()
BOOT_MAGIC_SIZE = 8
BOOT_NAME_SIZE = 16
BOOT_ARGS_SIZE = 512
BOOT_ID_SIZE = 32
BOOT_EXTRA_ARGS_SIZE = 1024


class Field(NamedTuple):
	name: str
	offset: int
	format: str

	@property
	def size(self) -> int:
		return struct.calcsize(self.format)


# Byte offsets of the boot_img_hdr fields, all integers are little-endian
FIELDS: List[Field] = [
	Field('magic', 0, f'<{BOOT_MAGIC_SIZE}s'),
	Field('kernel_size', 8, '<I'),
	Field('kernel_addr', 12, '<I'),
	Field('ramdisk_size', 16, '<I'),
	Field('ramdisk_addr', 20, '<I'),
	Field('second_size', 24, '<I'),
	Field('second_addr', 28, '<I'),
	Field('tags_addr', 32, '<I'),
	Field('page_size', 36, '<I'),
	Field('header_version', 40, '<I'),
	Field('os_version', 44, '<I'),
	Field('name', 48, f'<{BOOT_NAME_SIZE}s'),
	Field('cmdline', 64, f'<{BOOT_ARGS_SIZE}s'),
	Field('id', 576, f'<{BOOT_ID_SIZE}s'),
	Field('extra_cmdline', 608, f'<{BOOT_EXTRA_ARGS_SIZE}s'),
]

HEADER_SIZE = FIELDS[-1].offset + FIELDS[-1].size


class FormatError(Exception):
	"""Header does not describe a usable boot image. `value` is the offending raw value."""
	message = 'Invalid boot image header'

	def __init__(self, value) -> None:
		super().__init__(f'{self.message}: {value!r}')
		self.value = value


class TruncatedHeader(FormatError):
	message = 'Header is truncated, length'


class BadMagic(FormatError):
	message = 'Invalid magic number at start of header'


class EmptyKernel(FormatError):
	message = 'Invalid kernel_size'


class EmptyRamdisk(FormatError):
	message = 'Invalid ramdisk_size'


class InvalidPageSize(FormatError):
	message = 'Invalid page_size'


@dataclass(frozen=True)
class Header:
	magic: bytes = BOOT_MAGIC
	kernel_size: int = 0
	kernel_addr: int = 0
	ramdisk_size: int = 0
	ramdisk_addr: int = 0
	second_size: int = 0
	second_addr: int = 0
	tags_addr: int = 0
	page_size: int = 2048
	header_version: int = 0
	os_version: int = 0
	# Fixed width buffers, not necessarily null terminated
	name: bytes = b''
	cmdline: bytes = b''
	id: bytes = bytes(BOOT_ID_SIZE)
	extra_cmdline: bytes = b''


def decode(raw: bytes) -> Header:
	"""
	Decode the boot image header at the start of raw.

	Only the first HEADER_SIZE bytes are used, so the whole image may be passed.
	Raises a FormatError subclass if the header fails validation.
	"""
	if len(raw) < HEADER_SIZE:
		raise TruncatedHeader(len(raw))

	values = {f.name: struct.unpack_from(f.format, raw, f.offset)[0] for f in FIELDS}
	header = Header(**values)

	if header.magic != BOOT_MAGIC:
		raise BadMagic(header.magic)
	if header.kernel_size == 0:
		raise EmptyKernel(header.kernel_size)
	if header.ramdisk_size == 0:
		raise EmptyRamdisk(header.ramdisk_size)
	if header.page_size == 0:
		raise InvalidPageSize(header.page_size)

	return header


def encode(header: Header) -> bytes:
	# struct pads short byte strings with null bytes
	raw = bytearray(HEADER_SIZE)
	for f in FIELDS:
		struct.pack_into(f.format, raw, f.offset, getattr(header, f.name))
	return bytes(raw)

