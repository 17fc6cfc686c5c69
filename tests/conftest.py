# SPDX-License-Identifier: GPL-2.0-only
import dataclasses

import pytest

from bootimg import Header, encode

KERNEL_ADDR = 0x10008000
RAMDISK_ADDR = 0x11000000
SECOND_ADDR = 0x10f00000
TAGS_ADDR = 0x10000100

# 9.0.0, 2019-06
OS_VERSION = (9 << 14 | 0 << 7 | 0) << 11 | (19 << 4 | 6)


@pytest.fixture
def header() -> Header:
	return Header(
		kernel_size=5000,
		kernel_addr=KERNEL_ADDR,
		ramdisk_size=3000,
		ramdisk_addr=RAMDISK_ADDR,
		second_size=0,
		second_addr=SECOND_ADDR,
		tags_addr=TAGS_ADDR,
		page_size=2048,
		os_version=OS_VERSION,
		name=b'msm8916',
		cmdline=b'console=ttyMSM0,115200 androidboot.hardware=qcom',
		id=bytes(range(1, 21)) + bytes(12),
	)


@pytest.fixture
def make_raw(header):
	def make(**changes) -> bytes:
		return encode(dataclasses.replace(header, **changes))
	return make
