# SPDX-License-Identifier: GPL-2.0-only
from __future__ import annotations

import shlex
from dataclasses import dataclass
from typing import List, Optional, Tuple

import fields
from bootimg import Header
from layout import Layout, Slice


@dataclass(frozen=True)
class ComponentPaths:
	kernel: str = 'kernel.img'
	ramdisk: str = 'ramdisk.img'
	second: str = 'secondary.img'
	output: str = 'newboot.img'


@dataclass(frozen=True)
class RemakeParameters:
	kernel: str
	ramdisk: str
	second: Optional[str]
	cmdline: str
	base: int
	kernel_offset: int
	ramdisk_offset: int
	second_offset: int
	tags_offset: int
	os_version: str
	os_patch_level: str
	board: str
	pagesize: int
	output: str

	def arguments(self) -> List[Tuple[str, str]]:
		args = [
			('--kernel', self.kernel),
			('--ramdisk', self.ramdisk),
		]
		if self.second is not None:
			args.append(('--second', self.second))
		args += [
			('--cmdline', self.cmdline),
			('--base', f'{self.base:#x}'),
			('--kernel_offset', f'{self.kernel_offset:#x}'),
			('--ramdisk_offset', f'{self.ramdisk_offset:#x}'),
			('--second_offset', f'{self.second_offset:#x}'),
			('--os_version', self.os_version),
			('--os_patch_level', self.os_patch_level),
			('--tags_offset', f'{self.tags_offset:#x}'),
			('--board', self.board),
			('--pagesize', f'{self.pagesize:#x}'),
			('--output', self.output),
		]
		return args


def build_parameters(header: Header, layout: Layout, paths: ComponentPaths) -> RemakeParameters:
	"""
	Collect the mkbootimg arguments that rebuild an equivalent image.

	The base is always 0: the header stores absolute load addresses, so they
	are passed to mkbootimg unchanged as offsets from a zero base.
	"""
	version, patch_level = fields.decode_os_version(header.os_version)

	return RemakeParameters(
		kernel=paths.kernel,
		ramdisk=paths.ramdisk,
		second=paths.second if layout[Slice.SECOND].size else None,
		# mkbootimg splits long command lines over both fields
		cmdline=fields.c_str(header.cmdline + header.extra_cmdline),
		base=0,
		kernel_offset=header.kernel_addr,
		ramdisk_offset=header.ramdisk_addr,
		second_offset=header.second_addr,
		tags_offset=header.tags_addr,
		os_version=str(version),
		os_patch_level=str(patch_level),
		board=fields.c_str(header.name),
		pagesize=header.page_size,
		output=paths.output,
	)


def generate_remake_script(params: RemakeParameters, mkbootimg: str = 'mkbootimg') -> str:
	lines = [mkbootimg] + [f' {flag} {shlex.quote(value)}' for flag, value in params.arguments()]
	return '#!/bin/sh\n' + ' \\\n'.join(lines) + '\n'
