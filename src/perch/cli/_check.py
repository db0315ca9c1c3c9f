"""``perch check``: startup validation without serving.

Runs the same template load and bootstrap the server would, so
anything that would abort startup is reported here instead.
"""

import argparse
import sys

from perch.backend import ProdBackend, bootstrap
from perch.config import SSRConfig
from perch.errors import PerchError
from perch.template import load_template


def run_check(args: argparse.Namespace) -> None:
    """Validate the project and exit non-zero on failure."""
    config = SSRConfig(
        root=args.root,
        dev=not args.production,
        index=args.index,
        dist=args.dist,
    )
    try:
        template = load_template(config.index_path)
        backend = bootstrap(config)
        if isinstance(backend, ProdBackend) and not backend.resolver.entry_path.is_file():
            msg = f"Server entry {backend.resolver.entry_path} does not exist"
            raise PerchError(msg)
    except PerchError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    print(f"ok: {template.path} ({config.mode.value})")
