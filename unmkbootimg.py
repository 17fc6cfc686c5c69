# SPDX-License-Identifier: GPL-2.0-only
from __future__ import annotations

import argparse
import os
import sys
from typing import BinaryIO, List, Optional

import bootimg
import fields
import remake
from bootimg import Header
from layout import Layout, LayoutEntry, Slice, compute_layout, image_size
from options import Options


def extract_file(f: BinaryIO, name: str, entry: LayoutEntry) -> None:
	f.seek(entry.offset)
	remaining = entry.size
	try:
		with open(name, 'wb') as o:
			# Copy one page at a time, the padding after the slice is left out
			while remaining:
				chunk = f.read(min(remaining, entry.page_size))
				if not chunk:
					raise EOFError(f"Unexpected end of input while reading {entry.slice.name.lower()} "
								   f"at offset {f.tell():#x}, {remaining} bytes missing")
				o.write(chunk)
				remaining -= len(chunk)
	except EOFError:
		# Do not leave a partial slice behind
		os.remove(name)
		raise


def print_info(header: Header, layout: Layout) -> None:
	version, patch_level = fields.decode_os_version(header.os_version)

	print(f"Page size: {header.page_size}B")
	print(f"Kernel size: {layout[Slice.KERNEL].size}B")
	print(f"Ramdisk size: {layout[Slice.RAMDISK].size}B")
	print(f"Second size: {layout[Slice.SECOND].size}B")
	print(f"Android Version: {version}; Patch Level: {patch_level}")
	print(f"Image ID: {fields.format_image_id(header.id)}")


def check_header(header: Header) -> None:
	if header.page_size & (header.page_size - 1):
		print(f"WARNING: page_size {header.page_size} is not a power of two", file=sys.stderr)

	_, patch_level = fields.decode_os_version(header.os_version)
	if not 1 <= patch_level.month <= 12:
		print(f"WARNING: os_patch_level has invalid month {patch_level.month}", file=sys.stderr)


def unpack_image(f: BinaryIO, dest_dir: str, options: Options) -> None:
	if options.verbose:
		print("Reading header...")
	header = bootimg.decode(f.read(bootimg.HEADER_SIZE))
	layout = compute_layout(header)
	check_header(header)

	if f.seekable():
		size = f.seek(0, os.SEEK_END)
		if size < image_size(layout):
			raise EOFError(f"Unexpected end of input, image is {size} bytes but the header "
						   f"describes {image_size(layout)} bytes")

	if options.verbose:
		print_info(header, layout)

	paths = options.component_paths()
	dests = {
		Slice.KERNEL: paths.kernel,
		Slice.RAMDISK: paths.ramdisk,
		Slice.SECOND: paths.second,
	}

	for s, name in dests.items():
		entry = layout[s]
		if entry.size == 0:
			continue
		if options.verbose:
			print(f'Writing "{name}"')
		extract_file(f, os.path.join(dest_dir, name), entry)

	params = remake.build_parameters(header, layout, paths)
	script = os.path.join(dest_dir, options.remake_script)
	if options.verbose:
		print(f'Writing "{options.remake_script}"')
	with open(script, 'w', encoding='utf-8', errors='surrogateescape') as o:
		o.write(remake.generate_remake_script(params, options.mkbootimg))

	try:
		os.chmod(script, 0o750)
	except OSError as e:
		print(f"WARNING: Failed to change file mode to 0750: {e}", file=sys.stderr)


def parse_args(argv: Optional[List[str]] = None) -> Options:
	parser = argparse.ArgumentParser(description="""
		Extract the kernel, ramdisk and second stage bootloader from an Android boot image,
		and create a script that recombines them into a new boot image by running mkbootimg
		with the parameters from the original image header.
	""")
	parser.add_argument('image', nargs='?', type=argparse.FileType('rb'), help="Android boot image to extract from")
	parser.add_argument('-s', '--src', type=argparse.FileType('rb'), help="Same as image")
	parser.add_argument('-d', '--dest-dir', help="""
		Write the extracted images here instead of the directory containing src.
	""")
	parser.add_argument('-v', '--verbose', action='store_true', help="Print header information")
	parser.add_argument('-r', '--remake-script', default='remkbootimg.sh', help="""
		File name of the remake script (default: %(default)s)
	""")
	parser.add_argument('-m', '--mkbootimg', default='mkbootimg', help="""
		Command used for mkbootimg in the remake script (default: %(default)s)
	""")
	parser.add_argument('-n', '--output', default='newboot.img', help="""
		File name of the boot image created by the remake script (default: %(default)s)
	""")
	args = parser.parse_args(argv, namespace=Options())
	if args.src is not None and args.image is not None:
		parser.error("image and -s/--src are mutually exclusive")
	if args.src is None:
		if args.image is None:
			parser.error("the following arguments are required: image")
		args.src = args.image
	return args


def main(argv: Optional[List[str]] = None) -> int:
	args = parse_args(argv)

	with args.src as f:
		dest_dir = args.dest_dir
		if dest_dir is None:
			dest_dir = os.path.dirname(os.path.abspath(f.name))

		try:
			os.makedirs(dest_dir, exist_ok=True)
			unpack_image(f, dest_dir, args)
		except (bootimg.FormatError, EOFError, OSError) as e:
			print(f"ERROR: {f.name}: {e}", file=sys.stderr)
			return 1

	return 0


if __name__ == '__main__':
	sys.exit(main())
