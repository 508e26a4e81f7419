"""Entry point for running hotdictate as a module: python -m hotdictate"""

import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from hotdictate.app import DictationApp
from hotdictate.config import Config
from hotdictate.errors import ConfigError


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity setting."""
    level = logging.INFO if verbose else logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    # Reduce noise from third-party libraries
    for name in ("urllib3", "requests", "sounddevice", "pynput"):
        logging.getLogger(name).setLevel(logging.ERROR)


def main() -> int:
    """Main entry point."""
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    try:
        config = Config.from_env()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    setup_logging(config.verbose)

    app = DictationApp(config)

    try:
        app.run()
        return 0
    except KeyboardInterrupt:
        print("\n👋 Interrupted")
        return 130
    except Exception as e:
        logging.exception("Fatal error: %s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        app.shutdown()


if __name__ == "__main__":
    sys.exit(main())
