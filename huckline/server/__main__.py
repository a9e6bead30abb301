# Copyright (C) 2025 Richard Owen
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""Entry point: python -m huckline.server"""

from __future__ import annotations

import argparse

import uvicorn

from huckline.engine.config import ENGINE_CONFIG


def main() -> None:
    """Parse arguments and serve the compute API."""
    parser = argparse.ArgumentParser(description="Huckline heat-map compute service")
    parser.add_argument("--host", type=str, default=ENGINE_CONFIG.remote.host)
    parser.add_argument("--port", type=int, default=ENGINE_CONFIG.remote.port)
    args = parser.parse_args()

    from . import create_app

    uvicorn.run(create_app(), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
