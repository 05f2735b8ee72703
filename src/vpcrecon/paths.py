from __future__ import annotations

import os
import pathlib


class Paths:
    @property
    def root(self) -> pathlib.Path:
        """Return the targets configuration directory.

        Raises:
            RuntimeError: If VPCRECON_ROOT is not set in the environment

        """
        if "VPCRECON_ROOT" not in os.environ:
            msg = "VPCRECON_ROOT environment variable not set."
            raise RuntimeError(msg)

        return pathlib.Path(os.environ["VPCRECON_ROOT"])

    def cluster(self, name: str) -> pathlib.Path:
        return self.root / name
