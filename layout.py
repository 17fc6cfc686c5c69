# SPDX-License-Identifier: GPL-2.0-only
from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, unique
from typing import Tuple

from bootimg import HEADER_SIZE, Header, InvalidPageSize


@unique
class Slice(IntEnum):
	HEADER = 0
	KERNEL = 1
	RAMDISK = 2
	SECOND = 3


@dataclass(frozen=True)
class LayoutEntry:
	slice: Slice
	offset: int
	size: int  # Exact content size, without padding
	page_count: int
	page_size: int

	@property
	def padded_size(self) -> int:
		return self.page_count * self.page_size

	@property
	def end(self) -> int:
		return self.offset + self.padded_size


Layout = Tuple[LayoutEntry, LayoutEntry, LayoutEntry, LayoutEntry]


def page_count(size: int, page_size: int) -> int:
	return (size + page_size - 1) // page_size


def padded_size(size: int, page_size: int) -> int:
	return page_count(size, page_size) * page_size


def compute_layout(header: Header) -> Layout:
	"""
	Compute where each slice is stored in the image.

	Slices follow each other in the order of Slice, each starting on a page
	boundary. A slice of size 0 (e.g. no second stage bootloader) occupies no
	pages but still gets an entry, so the layout can always be indexed by Slice.
	"""
	page_size = header.page_size
	if page_size == 0:
		raise InvalidPageSize(page_size)

	sizes = {
		Slice.HEADER: HEADER_SIZE,
		Slice.KERNEL: header.kernel_size,
		Slice.RAMDISK: header.ramdisk_size,
		Slice.SECOND: header.second_size,
	}

	entries = []
	offset = 0
	for s in Slice:
		entry = LayoutEntry(s, offset, sizes[s], page_count(sizes[s], page_size), page_size)
		entries.append(entry)
		offset = entry.end

	return tuple(entries)


def image_size(layout: Layout) -> int:
	# Padding after the last slice is often missing, so it is not required
	return max(e.offset + e.size for e in layout if e.size)
