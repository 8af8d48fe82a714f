#!/usr/bin/env python3
import argparse
import logging
import subprocess
import sys
from pathlib import Path

from lens_profile.config import ConfigError, load_config
from lens_profile.lens.client import LensClient
from lens_profile.lens.errors import LensError
from lens_profile.pipeline import load_profile_page
from lens_profile.report.render import write_profile_page
from lens_profile.util.paths import resolve_out_dir

logger = logging.getLogger("lens_profile")


def main(argv=None):
    ap = argparse.ArgumentParser(description="Render a Lens profile page to static HTML")
    ap.add_argument("--config", default="config.yml", help="config.yml (or the old config.json)")
    ap.add_argument("--handle", default=None, help="profile to render instead of the configured lens_name")
    ap.add_argument("--out-dir", default=None, help="override output directory for index.html")
    ap.add_argument("--open", dest="open_page", action=argparse.BooleanOptionalAction, default=False,
                    help="open the rendered page in the default browser")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    config_path = Path(args.config)
    try:
        config = load_config(config_path)
        if args.handle:
            config = config.with_handle(args.handle)
    except ConfigError as e:
        logger.error("Error loading configuration: %s", e)
        return 1

    logger.info("Using handle %s", config.handle)
    try:
        page = load_profile_page(LensClient(config), config)
    except LensError as e:
        logger.error("Error loading profile: %s", e)
        return 1

    # defaults <- config <- CLI
    out_dir = args.out_dir or config.save_dir or "data/site"
    html_path = write_profile_page(page, resolve_out_dir(out_dir, config_path.resolve().parent))

    print("[lens_profile] Wrote:")
    print(f"  - html: {html_path}")
    print(f"  - posts: {len(page.cards)}")
    for err in page.errors:
        print(f"  ! {err}")

    if args.open_page:
        opener = "open" if sys.platform == "darwin" else "xdg-open"
        try:
            subprocess.run([opener, str(html_path)], check=False)
        except OSError as e:
            logger.warning("Could not open %s: %s", html_path, e)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
