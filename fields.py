# SPDX-License-Identifier: GPL-2.0-only
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from bootimg import BOOT_ID_SIZE

# Length of a SHA-1 digest stored at the start of the id field
SHA1_SIZE = 20


@dataclass(frozen=True)
class OsVersion:
	major: int
	minor: int
	patch: int

	def __str__(self) -> str:
		return f'{self.major}.{self.minor}.{self.patch}'


@dataclass(frozen=True)
class PatchLevel:
	year: int
	month: int
	# Not stored in the header
	day: int = 1

	def __str__(self) -> str:
		return f'{self.year:04}-{self.month:02}-{self.day:02}'


def decode_os_version(raw: int) -> Tuple[OsVersion, PatchLevel]:
	"""
	Split the packed os_version header field.

	Bit layout: aaaaaaabbbbbbbcccccccyyyyyyymmmm
	where a.b.c is the Android version and 2000+y, m the security patch level.
	The month is not validated, as mkbootimg does not validate it either.
	"""
	version = raw >> 11
	patch_level = raw & 0x7ff

	return (
		OsVersion((version >> 14) & 0x7f, (version >> 7) & 0x7f, version & 0x7f),
		PatchLevel(2000 + ((patch_level >> 4) & 0x7f), patch_level & 0xf),
	)


def is_sha1_id(image_id: bytes) -> bool:
	# mkbootimg stores a SHA-1 digest and leaves the remaining 12 bytes zero.
	# A non SHA-1 id that happens to end with 12 zero bytes is indistinguishable.
	return not any(image_id[SHA1_SIZE:BOOT_ID_SIZE])


def format_image_id(image_id: bytes) -> str:
	if is_sha1_id(image_id):
		return image_id[:SHA1_SIZE].hex() + ' (sha1)'

	# 4 byte words separated by space, bytes within a word by colon
	words = [image_id[i:i + 4] for i in range(0, BOOT_ID_SIZE, 4)]
	return ' '.join(':'.join(f'{b:02x}' for b in w) for w in words)


def c_str(buf: bytes) -> str:
	# Undecodable bytes are kept as surrogates, encode with the same handler to get them back
	return buf.split(b'\0', 1)[0].decode(errors='surrogateescape')
