# SPDX-License-Identifier: GPL-2.0-only
from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, Optional

from remake import ComponentPaths


@dataclass(init=False)
class Options:
	image: Optional[BinaryIO]
	src: BinaryIO
	dest_dir: Optional[str]
	verbose: bool
	remake_script: str
	mkbootimg: str
	output: str

	def component_paths(self) -> ComponentPaths:
		return ComponentPaths(output=self.output)
