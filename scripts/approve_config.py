#!/usr/bin/env python3
"""
Approve a configuration set by writing its checksum to
APPROVED_FINGERPRINT.

Usage:
    python scripts/approve_config.py [config_set_directory]

If no directory is given, defaults to rental_config/sets/default/

The script:
  1. Loads and validates root.yaml from the directory
  2. Writes the config checksum to APPROVED_FINGERPRINT

The APPROVED_FINGERPRINT file is a separate artifact from the YAML;
changing root.yaml without re-running approval will cause
get_active_config() to raise ConfigIntegrityError.
"""

import sys
from pathlib import Path

# Add project root to path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from rental_config.integrity import PINFILE_NAME
from rental_config.loader import load_config_set


def approve(config_dir: Path) -> str:
    """Load, validate, and write the pin file.

    Returns the checksum that was written.
    """
    print(f"Loading configuration from: {config_dir}")
    try:
        config = load_config_set(config_dir)
    except (KeyError, ValueError) as e:
        print(f"VALIDATION FAILED: {e}")
        sys.exit(1)
    print(f"  config_id:  {config.config_id}")
    print(f"  version:    {config.version}")
    print(f"  mint_price: {config.mint_price}")
    print(f"  supply_cap: {config.supply_cap}")
    print(f"  checksum:   {config.checksum}")

    pin_path = config_dir / PINFILE_NAME
    pin_path.write_text(config.checksum + "\n")
    print(f"Wrote {pin_path}")
    return config.checksum


def main():
    if len(sys.argv) > 1:
        target = Path(sys.argv[1])
    else:
        target = ROOT / "rental_config" / "sets" / "default"

    if not target.is_dir():
        print(f"Error: directory not found: {target}", file=sys.stderr)
        sys.exit(1)

    approve(target)
    print("Done. Config is now pinned.")


if __name__ == "__main__":
    main()
