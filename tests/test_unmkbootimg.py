# SPDX-License-Identifier: GPL-2.0-only
import io
import os
import stat

import pytest

import unmkbootimg
from conftest import OS_VERSION
from layout import LayoutEntry, Slice

PAGE_SIZE = 2048


def pad(data: bytes) -> bytes:
	return data + bytes(-len(data) % PAGE_SIZE)


@pytest.fixture
def image(tmp_path, make_raw):
	def make(kernel=b'K' * 5000, ramdisk=b'R' * 3000, second=b'', **changes):
		raw = make_raw(kernel_size=len(kernel), ramdisk_size=len(ramdisk),
					   second_size=len(second), **changes)
		path = tmp_path / 'boot.img'
		path.write_bytes(pad(raw) + pad(kernel) + pad(ramdisk) + pad(second))
		return path
	return make


def test_extract(tmp_path, image):
	src = image()
	assert unmkbootimg.main([str(src)]) == 0

	assert (tmp_path / 'kernel.img').read_bytes() == b'K' * 5000
	assert (tmp_path / 'ramdisk.img').read_bytes() == b'R' * 3000
	assert not (tmp_path / 'secondary.img').exists()

	script = tmp_path / 'remkbootimg.sh'
	assert stat.S_IMODE(os.stat(script).st_mode) == 0o750
	text = script.read_text()
	assert text.startswith('#!/bin/sh\nmkbootimg \\\n')
	assert ' --second ' not in text
	assert ' --output newboot.img\n' in text


def test_extract_second(tmp_path, image):
	src = image(second=b'S' * 10)
	assert unmkbootimg.main([str(src)]) == 0

	assert (tmp_path / 'secondary.img').read_bytes() == b'S' * 10
	assert ' --second secondary.img \\\n' in (tmp_path / 'remkbootimg.sh').read_text()


def test_options(tmp_path, image):
	src = image()
	out = tmp_path / 'out' / 'nested'
	assert unmkbootimg.main([str(src), '-d', str(out), '-r', 'remake.sh',
							 '-m', '/opt/mkbootimg', '-n', 'boot-new.img']) == 0

	assert (out / 'kernel.img').exists()
	text = (out / 'remake.sh').read_text()
	assert text.startswith('#!/bin/sh\n/opt/mkbootimg \\\n')
	assert text.endswith(' --output boot-new.img\n')


def test_verbose(image, capsys):
	src = image(id=b'\xaa' * 32)
	assert unmkbootimg.main(['-v', str(src)]) == 0

	out = capsys.readouterr().out
	assert 'Page size: 2048B\n' in out
	assert 'Kernel size: 5000B\n' in out
	assert 'Second size: 0B\n' in out
	assert 'Android Version: 9.0.0; Patch Level: 2019-06-01\n' in out
	assert 'Image ID: aa:aa:aa:aa aa:aa' in out
	assert 'Writing "kernel.img"' in out
	assert 'Writing "secondary.img"' not in out


def test_bad_magic(tmp_path, image, capsys):
	src = image(magic=b'NOTABOOT')
	assert unmkbootimg.main([str(src)]) == 1
	assert 'ERROR:' in capsys.readouterr().err
	assert not (tmp_path / 'kernel.img').exists()


def test_truncated_image(tmp_path, image, capsys):
	src = image()
	data = src.read_bytes()
	src.write_bytes(data[:PAGE_SIZE + 100])

	assert unmkbootimg.main([str(src)]) == 1
	assert 'Unexpected end of input' in capsys.readouterr().err


def test_warnings(image, capsys):
	src = image(page_size=3000, os_version=OS_VERSION & ~0xf)
	assert unmkbootimg.main([str(src)]) == 0
	err = capsys.readouterr().err
	assert 'WARNING: page_size 3000 is not a power of two' in err
	assert 'WARNING: os_patch_level has invalid month 0' in err


def test_truncated_image_writes_nothing(tmp_path, image):
	src = image()
	src.write_bytes(src.read_bytes()[:PAGE_SIZE + 100])

	assert unmkbootimg.main([str(src)]) == 1
	assert not (tmp_path / 'kernel.img').exists()
	assert not (tmp_path / 'remkbootimg.sh').exists()


def test_missing_final_padding(tmp_path, image):
	src = image()
	src.write_bytes(src.read_bytes()[:-(PAGE_SIZE - 3000 % PAGE_SIZE)])

	assert unmkbootimg.main([str(src)]) == 0
	assert (tmp_path / 'ramdisk.img').read_bytes() == b'R' * 3000


def test_partial_slice_removed(tmp_path):
	name = tmp_path / 'kernel.img'
	entry = LayoutEntry(Slice.KERNEL, 0, 5000, 3, PAGE_SIZE)

	with pytest.raises(EOFError):
		unmkbootimg.extract_file(io.BytesIO(b'K' * 3000), str(name), entry)
	assert not name.exists()


def test_src_option(tmp_path, image):
	src = image()
	assert unmkbootimg.main(['-s', str(src), '-n', 'new.img']) == 0
	assert (tmp_path / 'kernel.img').read_bytes() == b'K' * 5000


def test_src_required(capsys):
	with pytest.raises(SystemExit) as e:
		unmkbootimg.main([])
	assert e.value.code == 2


def test_script_keeps_undecodable_bytes(tmp_path, image):
	src = image(cmdline=b'x=caf\xe9', name=b'b\xffard')
	assert unmkbootimg.main([str(src)]) == 0

	script = (tmp_path / 'remkbootimg.sh').read_bytes()
	assert b" --cmdline 'x=caf\xe9' \\\n" in script
	assert b" --board 'b\xffard' \\\n" in script
