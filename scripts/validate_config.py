#!/usr/bin/env python3
"""Configuration validation script."""

import sys
from pathlib import Path

from gavcoin_sync.config.loader import CONFIG_FILENAME, ConfigLoader
from gavcoin_sync.config.validation import ConfigValidator


def main():
    """Main validation function."""
    loader = ConfigLoader.create(Path(sys.argv[1]) if len(sys.argv) > 1 else None)
    print(f"🔍 Validating {loader.config_dir / CONFIG_FILENAME}...")

    errors = ConfigValidator.validate_config(loader.merge_config())

    if errors:
        print(f"❌ Found {len(errors)} validation errors:")
        for error in errors:
            print(f"  • {error.field}: {error.message} (value: {error.value})")
        sys.exit(1)

    config = loader.load()
    print("✅ Configuration is valid")
    print(f"  • node: {config.rpc.url}")
    print(f"  • contract: {config.registry.contract_name} (tag {config.registry.category_tag})")
    policy = "monotonic" if config.sync.reject_stale_passes else "last-writer-wins"
    print(f"  • pass ordering: {policy}")


if __name__ == "__main__":
    main()
